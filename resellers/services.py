# src/resellers/services.py
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional
from admin.models import ActorType
from admin.services import AuditLog
from auth.services import AuthService
from database import commit_or_raise
from errors import NotFound, ValidationError
from resellers.models import Reseller
from resellers.schemas import ResellerCreate, ResellerUpdate, ResellerResponse
from subscription.models import Subscriber


class ResellerService:
    def __init__(self, db: Session, audit: Optional[AuditLog] = None):
        self.db = db
        self.audit = audit or AuditLog(db)

    def _response(self, reseller: Reseller, subscriber_count: Optional[int] = None) -> ResellerResponse:
        if subscriber_count is None:
            subscriber_count = self.db.query(func.count(Subscriber.id)).filter(
                Subscriber.reseller_id == reseller.id
            ).scalar() or 0
        response = ResellerResponse.model_validate(reseller)
        return response.model_copy(update={"subscriber_count": subscriber_count})

    def _get(self, reseller_id: int) -> Reseller:
        reseller = self.db.query(Reseller).filter(Reseller.id == reseller_id).first()
        if reseller is None:
            raise NotFound("Reseller not found")
        return reseller

    def get_resellers(self) -> List[ResellerResponse]:
        """Resellers, newest first, with the number of subscribers each owns."""
        counts = dict(
            self.db.query(Subscriber.reseller_id, func.count(Subscriber.id))
            .filter(Subscriber.reseller_id.isnot(None))
            .group_by(Subscriber.reseller_id)
            .all()
        )
        resellers = self.db.query(Reseller).order_by(Reseller.created_at.desc(), Reseller.id.desc()).all()
        return [self._response(r, counts.get(r.id, 0)) for r in resellers]

    def get_reseller(self, reseller_id: int) -> ResellerResponse:
        return self._response(self._get(reseller_id))

    def create_reseller(self, data: ResellerCreate, admin_id: int) -> ResellerResponse:
        reseller = Reseller(
            username=data.username,
            email=data.email,
            password_hash=AuthService.hash_password(data.password),
            credits=data.credits,
            commission=data.commission,
        )
        self.db.add(reseller)
        commit_or_raise(self.db, "create reseller")
        self.db.refresh(reseller)
        self.audit.record(ActorType.ADMIN, admin_id, "Reseller Created", f"Created reseller: {reseller.username}")
        return self._response(reseller, 0)

    def update_reseller(self, reseller_id: int, data: ResellerUpdate, admin_id: int) -> ResellerResponse:
        reseller = self._get(reseller_id)
        changes = data.model_dump(exclude_unset=True)
        password = changes.pop("password", None)
        if password is not None:
            reseller.password_hash = AuthService.hash_password(password)
        for field, value in changes.items():
            if value is None:
                raise ValidationError(f"{field} cannot be null")
            setattr(reseller, field, value)
        commit_or_raise(self.db, "update reseller")
        self.db.refresh(reseller)
        self.audit.record(ActorType.ADMIN, admin_id, "Reseller Updated", f"Updated reseller ID: {reseller_id}")
        return self._response(reseller)

    def delete_reseller(self, reseller_id: int, admin_id: int) -> int:
        """Delete a reseller; its subscribers stay, without an owner."""
        released = (
            self.db.query(Subscriber)
            .filter(Subscriber.reseller_id == reseller_id)
            .update({Subscriber.reseller_id: None}, synchronize_session=False)
        )
        deleted = self.db.query(Reseller).filter(Reseller.id == reseller_id).delete(synchronize_session=False)
        commit_or_raise(self.db, "delete reseller")
        self.db.expire_all()
        self.audit.record(
            ActorType.ADMIN, admin_id, "Reseller Deleted",
            f"Deleted reseller ID: {reseller_id} ({released} users released)"
        )
        return deleted
