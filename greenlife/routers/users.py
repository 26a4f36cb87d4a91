from fastapi import APIRouter, Depends
from sqlmodel import Session

from greenlife.core.errors import unwrap
from greenlife.core.security import get_current_user
from greenlife.database import get_session
from greenlife.models.user import ProfileUpdate, User, UserPublic
from greenlife.services.users import update_profile

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserPublic)
def read_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=UserPublic)
def edit_profile(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return unwrap(
        update_profile(session, current_user.id, payload.name, payload.phone, payload.address)
    )
