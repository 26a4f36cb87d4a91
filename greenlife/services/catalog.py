from typing import List, Optional

from sqlmodel import Session, func, select

from greenlife.core.errors import NotFoundError, service_operation
from greenlife.models.appointment import Appointment
from greenlife.models.service import Service, ServiceCreate, ServiceUpdate
from greenlife.models.therapist import Therapist
from greenlife.models.user import User
from greenlife.services.admin import log_admin_action


def list_active_services(session: Session) -> List[Service]:
    return session.exec(
        select(Service).where(Service.status == "active").order_by(Service.name)
    ).all()


def list_active_therapists(session: Session, exclude_user_id: Optional[int] = None) -> List[Therapist]:
    query = (
        select(Therapist)
        .join(User, Therapist.user_id == User.id)
        .where(Therapist.status == "active", User.status == "active")
    )
    # terapeuta não agenda consigo mesmo
    if exclude_user_id is not None:
        query = query.where(Therapist.user_id != exclude_user_id)
    return session.exec(query.order_by(Therapist.name)).all()


@service_operation("Failed to add service")
def create_service(session: Session, admin: User, data: ServiceCreate) -> Service:
    service = Service.model_validate(data)
    session.add(service)
    session.commit()
    session.refresh(service)

    log_admin_action(session, admin.id, f"Added service: {service.name}")
    session.refresh(service)
    return service


@service_operation("Failed to update service")
def update_service(session: Session, admin: User, service_id: int, data: ServiceUpdate) -> Service:
    service = session.get(Service, service_id)
    if not service:
        raise NotFoundError("Service not found")

    for field, value in data.model_dump().items():
        setattr(service, field, value)
    session.add(service)
    session.commit()
    session.refresh(service)

    log_admin_action(session, admin.id, f"Updated service ID {service_id}")
    session.refresh(service)
    return service


@service_operation("Failed to delete service")
def delete_service(session: Session, admin: User, service_id: int) -> str:
    """Hard-delete an unused service; deactivate one that has appointments.

    Returns ``"deactivated"`` or ``"deleted"``.
    """
    service = session.get(Service, service_id)
    if not service:
        raise NotFoundError("Service not found")

    in_use = session.exec(
        select(func.count(Appointment.id)).where(Appointment.service_id == service_id)
    ).one()

    if in_use:
        service.status = "inactive"
        session.add(service)
        outcome = "deactivated"
    else:
        session.delete(service)
        outcome = "deleted"
    session.commit()

    log_admin_action(session, admin.id, f"Service ID {service_id} {outcome}")
    return outcome
