from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from greenlife.core.errors import unwrap
from greenlife.core.security import generate_random_password, get_current_admin
from greenlife.database import get_session
from greenlife.models.logs import AdminLog
from greenlife.models.setting import SettingValue
from greenlife.models.user import AdminUserCreate, AdminUserUpdate, User, UserPublic, UserStatusUpdate
from greenlife.services import users as user_service
from greenlife.services.admin import get_system_setting, log_admin_action, update_system_setting
from greenlife.services.auth import register_user
from greenlife.services.notifications import send_appointment_reminders


router = APIRouter(prefix="/admin", tags=["admin"])


# =========================
# USUÁRIOS
# =========================

@router.get("/users", response_model=List[UserPublic])
def list_users(
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return user_service.list_users(session)


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    data: AdminUserCreate,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    # sem senha informada: gera uma temporária
    generated = None if data.password else generate_random_password()

    user = unwrap(
        register_user(
            session,
            name=data.name,
            email=data.email,
            password=data.password or generated,
            phone=data.phone,
            address=data.address,
            role=data.role,
            specialization=data.specialization,
            bio=data.bio,
            experience_years=data.experience_years,
        )
    )
    log_admin_action(session, current_admin.id, f"Added {data.role}: {data.email}")

    return {
        "user": UserPublic.model_validate(user),
        "temporary_password": generated,
    }


@router.put("/users/{user_id}", response_model=UserPublic)
def update_user(
    user_id: int,
    data: AdminUserUpdate,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    user = unwrap(
        user_service.update_user_and_sync_therapist(
            session,
            user_id,
            name=data.name,
            email=data.email,
            role=data.role,
            phone=data.phone,
            address=data.address,
            specialization=data.specialization,
            bio=data.bio,
            experience_years=data.experience_years,
        )
    )
    log_admin_action(session, current_admin.id, f"Updated user ID {user_id}")
    session.refresh(user)
    return user


@router.patch("/users/{user_id}/status", response_model=UserPublic)
def change_user_status(
    user_id: int,
    data: UserStatusUpdate,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    if user_id == current_admin.id and data.status != "active":
        raise HTTPException(status_code=403, detail="Cannot deactivate your own account")

    user = unwrap(user_service.set_user_status(session, user_id, data.status))
    log_admin_action(session, current_admin.id, f"Set user ID {user_id} status to {data.status}")
    session.refresh(user)
    return user


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    email = unwrap(user_service.delete_user(session, current_admin.id, user_id))
    log_admin_action(session, current_admin.id, f"Deleted user: {email}")
    return {"message": "User deleted successfully"}


# =========================
# MANUTENÇÃO
# =========================

@router.post("/maintenance/migrate-therapists")
def migrate_therapists(
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    migrated = unwrap(user_service.migrate_existing_therapists(session))
    log_admin_action(session, current_admin.id, "Migrated therapist records", f"Created: {migrated}")
    return {"migrated": migrated}


@router.post("/maintenance/cleanup-orphans")
def cleanup_orphans(
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    removed = unwrap(user_service.cleanup_orphaned_therapists(session))
    log_admin_action(session, current_admin.id, "Cleaned up orphaned therapists", f"Removed: {removed}")
    return {"removed": removed}


@router.post("/maintenance/send-reminders")
def send_reminders(
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return {"sent": send_appointment_reminders(session)}


@router.get("/logs")
def admin_logs(
    limit: int = 50,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return session.exec(
        select(AdminLog).order_by(AdminLog.created_at.desc(), AdminLog.id.desc()).limit(limit)
    ).all()


# =========================
# CONFIGURAÇÕES
# =========================

@router.get("/settings/{key}")
def read_setting(
    key: str,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return {"key": key, "value": get_system_setting(session, key)}


@router.put("/settings/{key}")
def write_setting(
    key: str,
    data: SettingValue,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    setting = unwrap(update_system_setting(session, key, data.value))
    log_admin_action(session, current_admin.id, f"Updated setting: {key}")
    return {"key": setting.key, "value": setting.value}
