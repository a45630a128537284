# src/admin/routes.py
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from admin.schemas import ActivityLogResponse, StatsResponse, SettingUpdate, SettingResponse
from admin.services import AuditLog, StatsService, SettingsService
from auth.models import AdminRole
from auth.routes import get_current_admin, require_role
from auth.schemas import Identity
from config import settings
from database import get_db

router = APIRouter(prefix="/api", tags=["admin"])


@router.get("/stats", response_model=StatsResponse)
def get_stats(db: Session = Depends(get_db), current_admin: Identity = Depends(get_current_admin)):
    """Dashboard counters."""
    return StatsService(db).summary()


@router.get("/activity-logs", response_model=List[ActivityLogResponse])
def get_activity_logs(
    limit: int = Query(settings.ACTIVITY_LOG_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_admin: Identity = Depends(get_current_admin)
):
    """Retrieve the most recent activity log entries."""
    return AuditLog(db).recent(limit)


@router.get("/settings", response_model=Dict[str, Optional[str]])
def get_settings(db: Session = Depends(get_db), current_admin: Identity = Depends(get_current_admin)):
    return SettingsService(db, AuditLog(db)).get_all()


@router.put("/settings/{key}", response_model=SettingResponse)
def put_setting(
    body: SettingUpdate,
    key: str = Path(..., min_length=1, max_length=50),
    db: Session = Depends(get_db),
    current_admin: Identity = Depends(require_role(AdminRole.SUPERADMIN))
):
    """Create or overwrite a panel setting (superadmin only)."""
    return SettingsService(db, AuditLog(db)).put(key, body.value, current_admin.id)
