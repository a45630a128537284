# src/catalog/routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from auth.routes import get_current_admin
from auth.schemas import Identity
from catalog.services import PackageService, ChannelService
from catalog.schemas import (
    PackageCreate, PackageUpdate, PackageResponse,
    ChannelCreate, ChannelUpdate, ChannelResponse,
)
from database import get_db

packages_router = APIRouter(prefix="/api/packages", tags=["packages"])
channels_router = APIRouter(prefix="/api/channels", tags=["channels"])


def get_package_service(db: Session = Depends(get_db)) -> PackageService:
    return PackageService(db)


def get_channel_service(db: Session = Depends(get_db)) -> ChannelService:
    return ChannelService(db)


@packages_router.get("", response_model=List[PackageResponse])
def list_packages(
    current_admin: Identity = Depends(get_current_admin),
    service: PackageService = Depends(get_package_service)
):
    return service.get_packages()


@packages_router.post("", response_model=PackageResponse)
def create_package(
    body: PackageCreate,
    current_admin: Identity = Depends(get_current_admin),
    service: PackageService = Depends(get_package_service)
):
    return service.create_package(body, current_admin.id)


@packages_router.get("/{package_id}", response_model=PackageResponse)
def get_package(
    package_id: int,
    current_admin: Identity = Depends(get_current_admin),
    service: PackageService = Depends(get_package_service)
):
    return service.get_package(package_id)


@packages_router.put("/{package_id}", response_model=PackageResponse)
def update_package(
    package_id: int,
    body: PackageUpdate,
    current_admin: Identity = Depends(get_current_admin),
    service: PackageService = Depends(get_package_service)
):
    return service.update_package(package_id, body, current_admin.id)


@packages_router.delete("/{package_id}")
def delete_package(
    package_id: int,
    current_admin: Identity = Depends(get_current_admin),
    service: PackageService = Depends(get_package_service)
):
    """Delete a package; subscribers on it keep existing without a package."""
    deleted = service.delete_package(package_id, current_admin.id)
    return {"message": "Package deleted successfully", "deleted": deleted}


@channels_router.get("", response_model=List[ChannelResponse])
def list_channels(
    current_admin: Identity = Depends(get_current_admin),
    service: ChannelService = Depends(get_channel_service)
):
    return service.get_channels()


@channels_router.post("", response_model=ChannelResponse)
def create_channel(
    body: ChannelCreate,
    current_admin: Identity = Depends(get_current_admin),
    service: ChannelService = Depends(get_channel_service)
):
    return service.create_channel(body, current_admin.id)


@channels_router.get("/{channel_id}", response_model=ChannelResponse)
def get_channel(
    channel_id: int,
    current_admin: Identity = Depends(get_current_admin),
    service: ChannelService = Depends(get_channel_service)
):
    return service.get_channel(channel_id)


@channels_router.put("/{channel_id}", response_model=ChannelResponse)
def update_channel(
    channel_id: int,
    body: ChannelUpdate,
    current_admin: Identity = Depends(get_current_admin),
    service: ChannelService = Depends(get_channel_service)
):
    return service.update_channel(channel_id, body, current_admin.id)


@channels_router.delete("/{channel_id}")
def delete_channel(
    channel_id: int,
    current_admin: Identity = Depends(get_current_admin),
    service: ChannelService = Depends(get_channel_service)
):
    deleted = service.delete_channel(channel_id, current_admin.id)
    return {"message": "Channel deleted successfully", "deleted": deleted}
