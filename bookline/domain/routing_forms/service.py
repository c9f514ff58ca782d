"""Routing form service - route matching and virtual queue insights"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import RoutingForm, User
from ...shared.dates import end_of_month, start_of_month
from ...shared.validators import validate_uuid
from .query_builder import AttributesConfig, FormFieldsConfig, tree_to_json_logic
from .repository import RoutingFormRepository
from .rules import RuleError, evaluate, truthy
from .schemas import MatchingMember, UserBookingData, VirtualQueue

logger = logging.getLogger(__name__)


def _matches(tree: Optional[dict], config: dict, data: dict[str, Any]) -> bool:
    logic = tree_to_json_logic(tree, config)
    if logic is None:
        return True
    try:
        return truthy(evaluate(logic, data))
    except RuleError as e:
        logger.warning(f"⚠️ Routing rule could not be evaluated: {e}")
        return False


def find_matching_route(form: RoutingForm, response: dict[str, Any]) -> Optional[dict]:
    """
    First route whose form field rules accept the response.

    response maps field ids to the submitted values. A fallback route (isFallback)
    is used only when no other route matches.
    """
    routes = form.routes or []
    fallback = next((route for route in routes if route.get("isFallback")), None)
    for route in routes:
        if route.get("isFallback"):
            continue
        if _matches(route.get("queryValue"), FormFieldsConfig, response):
            return route
    return fallback


class VirtualQueuesService:
    """Which team members each route of a form would send bookings to"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RoutingFormRepository()

    def get_virtual_queues(self, form_id: str, current_user: User) -> list[VirtualQueue]:
        if not validate_uuid(form_id):
            raise HTTPException(status_code=404, detail="Routing form not found")
        form = self.repo.get_form_by_id(self.db, form_id)
        if not form:
            raise HTTPException(status_code=404, detail="Routing form not found")

        if form.team_id:
            if not self.repo.is_member(self.db, form.team_id, current_user.id):
                raise HTTPException(status_code=403, detail="Not a member of this team")
        elif form.user_id != current_user.id:
            raise HTTPException(status_code=403, detail="Not allowed to view this routing form")

        if not form.team_id:
            return []

        members = self.repo.get_accepted_members(self.db, form.team_id)
        booking_counts = self.repo.count_bookings_by_user(
            self.db, [m.user_id for m in members], start_of_month(), end_of_month()
        )

        queues: list[VirtualQueue] = []
        for route in form.routes or []:
            if route.get("isFallback") or "attributesQueryValue" not in route:
                continue

            matching = [
                m
                for m in members
                if _matches(route.get("attributesQueryValue"), AttributesConfig, m.attributes or {})
            ]
            # Fewest bookings first is the order round robin would pick hosts in
            matching.sort(key=lambda m: (booking_counts.get(m.user_id, 0), m.user_id))

            queues.append(
                VirtualQueue(
                    routeId=route.get("id"),
                    matchingMembers=[
                        MatchingMember(id=m.user.id, name=m.user.name, email=m.user.email) for m in matching
                    ],
                    perUserData=[
                        UserBookingData(userId=m.user_id, bookingsCount=booking_counts.get(m.user_id, 0))
                        for m in matching
                    ],
                )
            )

        logger.info(f"📊 Built {len(queues)} virtual queues for routing form {form_id}")
        return queues
