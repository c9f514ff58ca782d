"""Routing form routers - query builder config and insights"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .query_builder import AttributesConfig, ConfigFor, FormFieldsConfig, serializable_config
from .schemas import VirtualQueue
from .service import VirtualQueuesService

router = APIRouter(tags=["Routing Forms"])


def get_virtual_queues_service(db: Session = Depends(get_db)) -> VirtualQueuesService:
    return VirtualQueuesService(db)


@router.get("/routing-forms/query-builder-config/{config_for}")
async def get_query_builder_config(config_for: ConfigFor):
    """Operators, types, widgets and settings the rule builder renders with"""
    config = AttributesConfig if config_for == ConfigFor.Attributes else FormFieldsConfig
    return serializable_config(config)


@router.get(
    "/insights/routing-forms/{form_id}/virtual-queues",
    response_model=list[VirtualQueue],
    tags=["Insights"],
)
async def get_virtual_queues(
    form_id: str,
    current_user: User = Depends(get_current_user),
    service: VirtualQueuesService = Depends(get_virtual_queues_service),
):
    """Members each attribute-routed route would send bookings to, fewest bookings first"""
    return service.get_virtual_queues(form_id, current_user)
