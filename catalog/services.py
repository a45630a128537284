# src/catalog/services.py
from sqlalchemy.orm import Session
from typing import List, Optional
from admin.models import ActorType
from admin.services import AuditLog
from catalog.models import Package, Channel
from catalog.schemas import PackageCreate, PackageUpdate, ChannelCreate, ChannelUpdate
from database import apply_changes, commit_or_raise
from errors import NotFound
from subscription.models import Subscriber


class PackageService:
    def __init__(self, db: Session, audit: Optional[AuditLog] = None):
        self.db = db
        self.audit = audit or AuditLog(db)

    def get_packages(self) -> List[Package]:
        """Packages, cheapest first."""
        return self.db.query(Package).order_by(Package.price.asc(), Package.id.asc()).all()

    def get_package(self, package_id: int) -> Package:
        package = self.db.query(Package).filter(Package.id == package_id).first()
        if package is None:
            raise NotFound("Package not found")
        return package

    def create_package(self, data: PackageCreate, admin_id: int) -> Package:
        package = Package(**data.model_dump())
        self.db.add(package)
        commit_or_raise(self.db, "create package")
        self.db.refresh(package)
        self.audit.record(ActorType.ADMIN, admin_id, "Package Created", f"Created package: {package.name}")
        return package

    def update_package(self, package_id: int, data: PackageUpdate, admin_id: int) -> Package:
        package = self.get_package(package_id)
        apply_changes(package, data.model_dump(exclude_unset=True), ("name", "duration", "price", "connections", "is_active"))
        commit_or_raise(self.db, "update package")
        self.db.refresh(package)
        self.audit.record(ActorType.ADMIN, admin_id, "Package Updated", f"Updated package ID: {package_id}")
        return package

    def delete_package(self, package_id: int, admin_id: int) -> int:
        """Delete a package, detaching its subscribers instead of removing them."""
        detached = (
            self.db.query(Subscriber)
            .filter(Subscriber.package_id == package_id)
            .update({Subscriber.package_id: None}, synchronize_session=False)
        )
        deleted = self.db.query(Package).filter(Package.id == package_id).delete(synchronize_session=False)
        commit_or_raise(self.db, "delete package")
        self.db.expire_all()
        self.audit.record(
            ActorType.ADMIN, admin_id, "Package Deleted",
            f"Deleted package ID: {package_id} ({detached} users detached)"
        )
        return deleted


class ChannelService:
    def __init__(self, db: Session, audit: Optional[AuditLog] = None):
        self.db = db
        self.audit = audit or AuditLog(db)

    def get_channels(self, active_only: bool = False) -> List[Channel]:
        """Channels in catalog order: category, then name."""
        query = self.db.query(Channel)
        if active_only:
            query = query.filter(Channel.is_active == True)
        return query.order_by(Channel.category.asc(), Channel.name.asc(), Channel.id.asc()).all()

    def get_channel(self, channel_id: int) -> Channel:
        channel = self.db.query(Channel).filter(Channel.id == channel_id).first()
        if channel is None:
            raise NotFound("Channel not found")
        return channel

    def create_channel(self, data: ChannelCreate, admin_id: int) -> Channel:
        channel = Channel(**data.model_dump())
        self.db.add(channel)
        commit_or_raise(self.db, "create channel")
        self.db.refresh(channel)
        self.audit.record(ActorType.ADMIN, admin_id, "Channel Created", f"Created channel: {channel.name}")
        return channel

    def update_channel(self, channel_id: int, data: ChannelUpdate, admin_id: int) -> Channel:
        channel = self.get_channel(channel_id)
        apply_changes(channel, data.model_dump(exclude_unset=True), ("name", "stream_url", "is_active"))
        commit_or_raise(self.db, "update channel")
        self.db.refresh(channel)
        self.audit.record(ActorType.ADMIN, admin_id, "Channel Updated", f"Updated channel ID: {channel_id}")
        return channel

    def delete_channel(self, channel_id: int, admin_id: int) -> int:
        deleted = self.db.query(Channel).filter(Channel.id == channel_id).delete(synchronize_session=False)
        commit_or_raise(self.db, "delete channel")
        self.audit.record(ActorType.ADMIN, admin_id, "Channel Deleted", f"Deleted channel ID: {channel_id}")
        return deleted
