from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from greenlife.core.errors import unwrap
from greenlife.core.security import get_current_admin
from greenlife.database import get_session
from greenlife.models.service import Service, ServiceCreate, ServiceUpdate
from greenlife.models.user import User
from greenlife.services import catalog


router = APIRouter(
    prefix="/services",
    tags=["services"]
)


@router.get("/")
def list_services(session: Session = Depends(get_session)):
    return catalog.list_active_services(session)


@router.get("/{service_id}")
def get_service(service_id: int, session: Session = Depends(get_session)):
    service = session.get(Service, service_id)
    if not service or service.status != "active":
        raise HTTPException(status_code=404, detail="Service not found")
    return service


# =========================
# ADMIN
# =========================

@router.post("/", status_code=status.HTTP_201_CREATED)
def create_service(
    payload: ServiceCreate,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return unwrap(catalog.create_service(session, current_admin, payload))


@router.put("/{service_id}")
def update_service(
    service_id: int,
    payload: ServiceUpdate,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return unwrap(catalog.update_service(session, current_admin, service_id, payload))


@router.delete("/{service_id}")
def delete_service(
    service_id: int,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    outcome = unwrap(catalog.delete_service(session, current_admin, service_id))
    if outcome == "deactivated":
        return {"message": "Service has appointments and was deactivated", "result": outcome}
    return {"message": "Service deleted successfully", "result": outcome}
