# src/auth/routes.py
from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import List, Optional
from auth.models import AdminRole
from auth.services import AuthService
from auth.schemas import AdminLogin, AdminCreate, AdminDetailResponse, LoginResponse, ChangePasswordRequest, Identity
from database import get_db

router = APIRouter(prefix="/api", tags=["auth"])
bearer_scheme = HTTPBearer(auto_error=False)


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_current_admin(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Identity:
    """Validate the bearer token of an administrative request."""
    return AuthService.validate_token(credentials.credentials if credentials else None)


def require_role(role: AdminRole):
    """Build a dependency that only lets identities of at least `role` through."""
    def checker(current_admin: Identity = Depends(get_current_admin)) -> Identity:
        AuthService.require_role(current_admin, role)
        return current_admin
    return checker


@router.post("/auth/login", response_model=LoginResponse)
def login(credentials: AdminLogin, request: Request, service: AuthService = Depends(get_auth_service)):
    """Login and return a signed session token."""
    token, admin = service.login(credentials.username, credentials.password, client_ip(request))
    return {"token": token, "token_type": "bearer", "user": admin}


@router.post("/auth/change-password")
def change_password(
    body: ChangePasswordRequest,
    current_admin: Identity = Depends(get_current_admin),
    service: AuthService = Depends(get_auth_service)
):
    service.change_password(current_admin, body.current_password, body.new_password)
    return {"message": "Password changed successfully"}


@router.get("/auth/me", response_model=Identity)
def read_current_admin(current_admin: Identity = Depends(get_current_admin)):
    return current_admin


@router.get("/admins", response_model=List[AdminDetailResponse])
def list_admins(
    current_admin: Identity = Depends(require_role(AdminRole.SUPERADMIN)),
    service: AuthService = Depends(get_auth_service)
):
    return service.list_admins()


@router.post("/admins", response_model=AdminDetailResponse)
def create_admin(
    body: AdminCreate,
    current_admin: Identity = Depends(require_role(AdminRole.SUPERADMIN)),
    service: AuthService = Depends(get_auth_service)
):
    """Create an administrator (superadmin only)."""
    return service.create_admin(body, current_admin)


@router.delete("/admins/{admin_id}")
def delete_admin(
    admin_id: int,
    current_admin: Identity = Depends(require_role(AdminRole.SUPERADMIN)),
    service: AuthService = Depends(get_auth_service)
):
    deleted = service.delete_admin(admin_id, current_admin)
    return {"message": "Admin deleted successfully", "deleted": deleted}
