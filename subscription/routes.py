# src/subscription/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from auth.routes import get_current_admin
from auth.schemas import Identity
from subscription.entitlement import EntitlementEngine
from subscription.services import SubscriberService
from subscription.schemas import (
    SubscriberCreate, SubscriberUpdate, SubscriberResponse,
    BulkExtendRequest, BulkExtendResponse, SubscriberConnections,
)
from database import get_db

router = APIRouter(prefix="/api/users", tags=["users"])


def get_subscriber_service(db: Session = Depends(get_db)) -> SubscriberService:
    return SubscriberService(db)


def get_entitlement_engine(db: Session = Depends(get_db)) -> EntitlementEngine:
    return EntitlementEngine(db)


@router.get("", response_model=List[SubscriberResponse])
def list_users(
    current_admin: Identity = Depends(get_current_admin),
    service: SubscriberService = Depends(get_subscriber_service)
):
    """Retrieve subscribers, newest first."""
    return service.list_subscribers()


@router.post("", response_model=SubscriberResponse)
def create_user(
    body: SubscriberCreate,
    current_admin: Identity = Depends(get_current_admin),
    service: SubscriberService = Depends(get_subscriber_service)
):
    return service.create_subscriber(body, current_admin.id)


@router.post("/bulk-extend", response_model=BulkExtendResponse)
def bulk_extend(
    body: BulkExtendRequest,
    current_admin: Identity = Depends(get_current_admin),
    engine: EntitlementEngine = Depends(get_entitlement_engine)
):
    """Extend the expiry date of several subscribers at once."""
    extended = engine.bulk_extend(body.user_ids, body.days, current_admin.id)
    return {"message": "Users extended successfully", "extended": extended}


@router.get("/{user_id}", response_model=SubscriberResponse)
def get_user(
    user_id: int,
    current_admin: Identity = Depends(get_current_admin),
    service: SubscriberService = Depends(get_subscriber_service)
):
    return SubscriberResponse.from_orm(service.get_subscriber(user_id))


@router.put("/{user_id}", response_model=SubscriberResponse)
def update_user(
    user_id: int,
    body: SubscriberUpdate,
    current_admin: Identity = Depends(get_current_admin),
    service: SubscriberService = Depends(get_subscriber_service)
):
    return service.update_subscriber(user_id, body, current_admin.id)


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    current_admin: Identity = Depends(get_current_admin),
    service: SubscriberService = Depends(get_subscriber_service)
):
    deleted = service.delete_subscriber(user_id, current_admin.id)
    return {"message": "User deleted successfully", "deleted": deleted}


@router.get("/{user_id}/connections", response_model=SubscriberConnections)
def get_user_connections(
    user_id: int,
    current_admin: Identity = Depends(get_current_admin),
    service: SubscriberService = Depends(get_subscriber_service)
):
    """Devices and sessions recorded for a subscriber."""
    return service.get_connections(user_id)
