# src/resellers/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from auth.routes import get_current_admin
from auth.schemas import Identity
from resellers.services import ResellerService
from resellers.schemas import ResellerCreate, ResellerUpdate, ResellerResponse
from database import get_db

router = APIRouter(prefix="/api/resellers", tags=["resellers"])


def get_reseller_service(db: Session = Depends(get_db)) -> ResellerService:
    return ResellerService(db)


@router.get("", response_model=List[ResellerResponse])
def list_resellers(
    current_admin: Identity = Depends(get_current_admin),
    service: ResellerService = Depends(get_reseller_service)
):
    return service.get_resellers()


@router.post("", response_model=ResellerResponse)
def create_reseller(
    body: ResellerCreate,
    current_admin: Identity = Depends(get_current_admin),
    service: ResellerService = Depends(get_reseller_service)
):
    return service.create_reseller(body, current_admin.id)


@router.get("/{reseller_id}", response_model=ResellerResponse)
def get_reseller(
    reseller_id: int,
    current_admin: Identity = Depends(get_current_admin),
    service: ResellerService = Depends(get_reseller_service)
):
    return service.get_reseller(reseller_id)


@router.put("/{reseller_id}", response_model=ResellerResponse)
def update_reseller(
    reseller_id: int,
    body: ResellerUpdate,
    current_admin: Identity = Depends(get_current_admin),
    service: ResellerService = Depends(get_reseller_service)
):
    return service.update_reseller(reseller_id, body, current_admin.id)


@router.delete("/{reseller_id}")
def delete_reseller(
    reseller_id: int,
    current_admin: Identity = Depends(get_current_admin),
    service: ResellerService = Depends(get_reseller_service)
):
    deleted = service.delete_reseller(reseller_id, current_admin.id)
    return {"message": "Reseller deleted successfully", "deleted": deleted}
