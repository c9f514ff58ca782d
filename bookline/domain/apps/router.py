"""App store router - installing integrations and event type app cards"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import EventTypeAppCardResponse, InstalledAppResponse, SendgridAddRequest
from .service import EventTypeAppService, SendgridService

router = APIRouter(tags=["Apps"])


def get_sendgrid_service(db: Session = Depends(get_db)) -> SendgridService:
    return SendgridService(db)


def get_event_type_app_service(db: Session = Depends(get_db)) -> EventTypeAppService:
    return EventTypeAppService(db)


@router.post("/api/integrations/sendgrid/add", response_model=InstalledAppResponse)
async def add_sendgrid(
    data: Optional[SendgridAddRequest] = None,
    current_user: User = Depends(get_current_user),
    service: SendgridService = Depends(get_sendgrid_service),
):
    """Store the user's Sendgrid API key and return where the installed app is shown"""
    url = service.add(data.api_key if data else None, current_user)
    return {"url": url}


@router.get("/event-types/{event_type_id}/apps/{slug}", response_model=EventTypeAppCardResponse)
async def get_event_type_app(
    event_type_id: int,
    slug: str,
    current_user: User = Depends(get_current_user),
    service: EventTypeAppService = Depends(get_event_type_app_service),
):
    return service.get_app_card(event_type_id, slug, current_user)


@router.put("/event-types/{event_type_id}/apps/{slug}", response_model=EventTypeAppCardResponse)
async def update_event_type_app(
    event_type_id: int,
    slug: str,
    data: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    service: EventTypeAppService = Depends(get_event_type_app_service),
):
    """Enable/disable an app on an event type and save its settings"""
    return service.update_app_card(event_type_id, slug, data, current_user)
