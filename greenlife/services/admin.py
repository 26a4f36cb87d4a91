import logging
from collections import Counter
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from greenlife.core.errors import service_operation
from greenlife.models.appointment import Appointment
from greenlife.models.inquiry import Inquiry
from greenlife.models.logs import AdminLog
from greenlife.models.service import Service
from greenlife.models.setting import SystemSetting
from greenlife.models.user import User

logger = logging.getLogger(__name__)


def log_admin_action(session: Session, admin_id: int, action: str, details: str = "") -> None:
    try:
        session.add(AdminLog(admin_id=admin_id, action=action, details=details))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Error logging admin action")


# =========================
# CONFIGURAÇÕES (chave/valor)
# =========================

def get_system_setting(session: Session, key: str, default: Optional[str] = None) -> Optional[str]:
    try:
        setting = session.get(SystemSetting, key)
    except SQLAlchemyError:
        logger.exception("Error getting system setting %s", key)
        return default
    return setting.value if setting else default


@service_operation("Failed to update setting")
def update_system_setting(session: Session, key: str, value: Optional[str]) -> SystemSetting:
    setting = session.get(SystemSetting, key)
    if setting:
        setting.value = value
        setting.updated_at = datetime.utcnow()
    else:
        setting = SystemSetting(key=key, value=value)

    session.add(setting)
    session.commit()
    session.refresh(setting)
    return setting


# =========================
# DASHBOARD
# =========================

def dashboard_stats(session: Session, today: Optional[date] = None) -> dict:
    today = today or date.today()

    appts = session.exec(select(Appointment)).all()
    by_status = Counter(a.status for a in appts)

    users = session.exec(select(User)).all()
    by_role = Counter(u.role for u in users)

    inquiries = session.exec(select(Inquiry)).all()

    # receita: só completed
    service_ids = {a.service_id for a in appts}
    services = session.exec(select(Service).where(Service.id.in_(service_ids))).all() if service_ids else []
    service_map = {s.id: s for s in services}

    total_revenue = 0.0
    monthly_revenue = 0.0
    for a in appts:
        s = service_map.get(a.service_id)
        if not s or a.status != "completed":
            continue
        total_revenue += float(s.price)
        if a.appointment_date.year == today.year and a.appointment_date.month == today.month:
            monthly_revenue += float(s.price)

    return {
        "appointments": {
            "total": len(appts),
            "today": sum(1 for a in appts if a.appointment_date == today),
            "status": dict(by_status),
        },
        "users": {
            "total": len(users),
            "roles": dict(by_role),
            "new_today": sum(1 for u in users if u.created_at.date() == today),
        },
        "inquiries": {
            "total": len(inquiries),
            "open": sum(1 for i in inquiries if i.status == "open"),
        },
        "revenue": {
            "total": round(total_revenue, 2),
            "monthly": round(monthly_revenue, 2),
        },
    }
