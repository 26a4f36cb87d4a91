from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from greenlife.core.errors import unwrap
from greenlife.core.security import SessionContext, get_current_admin, get_current_user, get_session_context
from greenlife.database import get_session
from greenlife.models.inquiry import InquiryCreate, InquiryResponse
from greenlife.models.user import User
from greenlife.services import inquiries as inquiry_service


router = APIRouter(prefix="/inquiries", tags=["inquiries"])


@router.post("/", status_code=status.HTTP_201_CREATED)
def submit_inquiry(
    data: InquiryCreate,
    session: Session = Depends(get_session),
    context: SessionContext = Depends(get_session_context),
):
    if context.authenticated:
        return unwrap(
            inquiry_service.submit_inquiry(session, context.user.id, data.subject, data.message, data.priority)
        )

    # formulário de contato público
    return unwrap(
        inquiry_service.submit_guest_inquiry(
            session, data.name, data.email, data.phone, data.subject, data.message, data.priority
        )
    )


@router.get("/")
def list_inquiries(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return inquiry_service.list_inquiries_for(session, current_user)


@router.post("/{inquiry_id}/respond")
def respond_inquiry(
    inquiry_id: int,
    data: InquiryResponse,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return unwrap(inquiry_service.respond_to_inquiry(session, current_admin, inquiry_id, data.response))


@router.delete("/{inquiry_id}")
def delete_inquiry(
    inquiry_id: int,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    unwrap(inquiry_service.delete_inquiry(session, current_admin, inquiry_id))
    return {"message": "Inquiry deleted successfully"}
