"""App services - installing integrations and event type app settings"""

import json
import logging

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import ENCRYPTION_KEY
from ...crypto import symmetric_encrypt
from ...enums import MembershipRole
from ...models import EventType, User
from .repository import AppRepository
from .schemas import APP_DATA_SCHEMAS, EventTypeAppCardResponse

logger = logging.getLogger(__name__)


def get_installed_app_path(variant: str, slug: str) -> str:
    return f"/apps/installed/{variant}?hl={slug}"


class SendgridService:
    """Installs the Sendgrid app for a user"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppRepository()

    def add(self, api_key: str, user: User) -> str:
        if not api_key:
            raise HTTPException(status_code=400, detail="No Api Key provided to check")

        try:
            encrypted = symmetric_encrypt(json.dumps({"api_key": api_key}), ENCRYPTION_KEY)
        except ValueError as e:
            logger.error(f"❌ Could not add Sendgrid app: {e}")
            raise HTTPException(status_code=500, detail="Invalid length - ENCRYPTION_KEY") from e

        try:
            self.repo.create_credential(
                self.db,
                type="sendgrid_other_calendar",
                key={"encrypted": encrypted},
                user_id=user.id,
                app_id="sendgrid",
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Could not add Sendgrid app: {e}")
            raise HTTPException(status_code=500, detail="Could not add Sendgrid app") from e

        logger.info(f"✅ Sendgrid installed for user {user.id}")
        return get_installed_app_path(variant="other", slug="sendgrid")


class EventTypeAppService:
    """Reads and writes the per-event-type settings of an app card"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppRepository()

    def _get_editable_event_type(self, event_type_id: int, user: User) -> EventType:
        event_type = self.repo.get_event_type(self.db, event_type_id)
        if not event_type:
            raise HTTPException(status_code=404, detail="Event type not found")

        if event_type.team_id:
            membership = self.repo.get_membership(self.db, event_type.team_id, user.id)
            if not membership:
                raise HTTPException(status_code=403, detail="Not a member of this team")
            if membership.role == MembershipRole.MEMBER.value and event_type.user_id != user.id:
                raise HTTPException(status_code=403, detail="Only team admins can change this event type")
        elif event_type.user_id != user.id:
            raise HTTPException(status_code=403, detail="Not allowed to edit this event type")
        return event_type

    @staticmethod
    def _schema_for(slug: str):
        schema = APP_DATA_SCHEMAS.get(slug)
        if not schema:
            raise HTTPException(status_code=404, detail=f"App {slug} has no event type settings")
        return schema

    @staticmethod
    def _card(event_type: EventType, slug: str, app_data: dict) -> EventTypeAppCardResponse:
        return EventTypeAppCardResponse(
            slug=slug,
            eventTypeId=event_type.id,
            teamId=event_type.team_id or None,
            enabled=bool(app_data.get("enabled")),
            appData=app_data,
        )

    def get_app_card(self, event_type_id: int, slug: str, user: User) -> EventTypeAppCardResponse:
        schema = self._schema_for(slug)
        event_type = self._get_editable_event_type(event_type_id, user)

        stored = ((event_type.event_metadata or {}).get("apps") or {}).get(slug) or {}
        try:
            app_data = schema.model_validate(stored).model_dump(mode="json")
        except ValidationError:
            # Stored data from an older schema version, show defaults instead of failing
            logger.warning(f"⚠️ Invalid {slug} app data on event type {event_type_id}, using defaults")
            app_data = schema().model_dump(mode="json")
        return self._card(event_type, slug, app_data)

    def update_app_card(
        self, event_type_id: int, slug: str, data: dict, user: User
    ) -> EventTypeAppCardResponse:
        schema = self._schema_for(slug)
        event_type = self._get_editable_event_type(event_type_id, user)

        try:
            app_data = schema.model_validate(data).model_dump(mode="json")
        except ValidationError as e:
            detail = [{"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in e.errors()]
            raise HTTPException(status_code=422, detail=detail) from e

        event_type = self.repo.save_app_data(self.db, event_type, slug, app_data)
        logger.info(
            f"🧩 {slug} {'enabled' if app_data['enabled'] else 'disabled'} on event type {event_type_id}"
        )
        return self._card(event_type, slug, app_data)
