"""App repository - Database operations for credentials and event type app data"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Credential, EventType, Membership


class AppRepository:
    """Repository for installed apps"""

    @staticmethod
    def create_credential(db: Session, **credential_data) -> Credential:
        credential = Credential(**credential_data)
        db.add(credential)
        db.commit()
        db.refresh(credential)
        return credential

    @staticmethod
    def get_event_type(db: Session, event_type_id: int) -> Optional[EventType]:
        return db.query(EventType).filter(EventType.id == event_type_id).first()

    @staticmethod
    def get_membership(db: Session, team_id: int, user_id: int) -> Optional[Membership]:
        return (
            db.query(Membership)
            .filter(
                Membership.team_id == team_id,
                Membership.user_id == user_id,
                Membership.accepted.is_(True),
            )
            .first()
        )

    @staticmethod
    def save_app_data(db: Session, event_type: EventType, slug: str, app_data: dict) -> EventType:
        # JSON columns are not mutation tracked, so assign a new dict
        metadata = dict(event_type.event_metadata or {})
        apps = dict(metadata.get("apps") or {})
        apps[slug] = app_data
        event_type.event_metadata = {**metadata, "apps": apps}
        db.commit()
        db.refresh(event_type)
        return event_type
