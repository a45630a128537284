# src/auth/services.py
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from passlib.context import CryptContext
from datetime import datetime, timedelta
from typing import Optional, List, Tuple
from auth.models import Administrator, AdminRole
from auth.schemas import AdminCreate, Identity
from admin.models import ActorType
from admin.services import AuditLog
from config import settings
from database import commit_or_raise
from errors import Unauthorized, Forbidden, InvalidCredentials, ValidationError

logger = logging.getLogger(__name__)


class AuthService:
    pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

    def __init__(self, db: Session, audit: Optional[AuditLog] = None):
        self.db = db
        self.audit = audit or AuditLog(db)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt."""
        return AuthService.pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        if not plain_password or not hashed_password:
            return False
        try:
            return AuthService.pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            # Unrecognized or corrupt hash
            return False

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Create a JWT access token."""
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.utcnow() + expires_delta
        else:
            expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def validate_token(token: Optional[str]) -> Identity:
        """Verify signature and expiry and return the bound identity."""
        if not token:
            raise Unauthorized("No token provided")
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM], options={"verify_exp": True})
        except JWTError:
            raise Unauthorized("Invalid token")
        sub = payload.get("sub")
        username = payload.get("username")
        role = payload.get("role")
        if sub is None or username is None or role is None or payload.get("exp") is None:
            raise Unauthorized("Invalid token")
        try:
            return Identity(id=int(sub), username=username, role=AdminRole(role))
        except ValueError:
            raise Unauthorized("Invalid token")

    @staticmethod
    def require_role(identity: Identity, role: AdminRole) -> None:
        if not identity.role.satisfies(role):
            raise Forbidden(f"{role.value.capitalize()} access required")

    def get_admin_by_identifier(self, identifier: str) -> Optional[Administrator]:
        """Retrieve an administrator by username or email."""
        return self.db.query(Administrator).filter(
            or_(Administrator.username == identifier, Administrator.email == identifier)
        ).first()

    def login(self, identifier: str, password: str, ip_address: Optional[str] = None) -> Tuple[str, Administrator]:
        admin = self.get_admin_by_identifier(identifier)
        if admin is None or not self.verify_password(password, admin.password_hash):
            logger.info(f"Failed login attempt for '{identifier}' from {ip_address}")
            raise InvalidCredentials()

        token = self.create_access_token(
            data={"sub": str(admin.id), "username": admin.username, "role": admin.role.value}
        )
        self.audit.record(ActorType.ADMIN, admin.id, "Login", ip_address=ip_address)
        return token, admin

    def change_password(self, identity: Identity, current_password: str, new_password: str) -> None:
        admin = self.db.query(Administrator).filter(Administrator.id == identity.id).first()
        if admin is None:
            raise Unauthorized("Invalid token")
        if not self.verify_password(current_password, admin.password_hash):
            raise InvalidCredentials("Current password is incorrect")

        admin.password_hash = self.hash_password(new_password)
        commit_or_raise(self.db, "change password")
        self.audit.record(ActorType.ADMIN, admin.id, "Password Changed")

    def list_admins(self) -> List[Administrator]:
        return self.db.query(Administrator).order_by(Administrator.created_at.desc(), Administrator.id.desc()).all()

    def create_admin(self, data: AdminCreate, identity: Identity) -> Administrator:
        admin = Administrator(
            username=data.username,
            email=data.email,
            password_hash=self.hash_password(data.password),
            role=data.role,
        )
        self.db.add(admin)
        commit_or_raise(self.db, "create admin")
        self.db.refresh(admin)
        self.audit.record(ActorType.ADMIN, identity.id, "Admin Created", f"Created {admin.role.value}: {admin.username}")
        return admin

    def delete_admin(self, admin_id: int, identity: Identity) -> int:
        if admin_id == identity.id:
            raise ValidationError("You cannot delete your own account")
        deleted = self.db.query(Administrator).filter(Administrator.id == admin_id).delete(synchronize_session=False)
        commit_or_raise(self.db, "delete admin")
        self.audit.record(ActorType.ADMIN, identity.id, "Admin Deleted", f"Deleted admin ID: {admin_id}")
        return deleted

    def seed_default_admin(self) -> Optional[Administrator]:
        """Create the bootstrap superadmin when no administrator exists."""
        if self.db.query(Administrator).first() is not None:
            return None
        admin = Administrator(
            username=settings.DEFAULT_ADMIN_USERNAME,
            email=settings.DEFAULT_ADMIN_EMAIL,
            password_hash=self.hash_password(settings.DEFAULT_ADMIN_PASSWORD),
            role=AdminRole.SUPERADMIN,
        )
        self.db.add(admin)
        self.db.commit()
        self.db.refresh(admin)
        logger.warning(
            f"Default admin created: {admin.username}. Change its password immediately."
        )
        return admin
