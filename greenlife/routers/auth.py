from fastapi import APIRouter, Depends, Form, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel, EmailStr
from sqlmodel import Session

from greenlife.core.errors import ErrorKind, unwrap
from greenlife.core.security import (
    SessionContext,
    clear_session_cookies,
    create_session_token,
    get_current_user,
    get_session_context,
    set_access_cookie,
    set_remember_cookie,
)
from greenlife.database import get_session
from greenlife.models.user import User, UserPublic, UserRegister
from greenlife.services import auth as auth_service


router = APIRouter(prefix="/auth", tags=["auth"])


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserPublic)
def register(payload: UserRegister, session: Session = Depends(get_session)):
    # cadastro público cria apenas clientes
    return unwrap(
        auth_service.register_user(
            session,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            phone=payload.phone,
            address=payload.address,
        )
    )


@router.post("/login")
def login(
    request: Request,
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    remember_me: bool = Form(False),
    session: Session = Depends(get_session),
):
    outcome = unwrap(
        auth_service.login_user(session, form_data.username, form_data.password, remember=remember_me)
    )
    user = outcome.user

    access_token = create_session_token(user)
    set_access_cookie(response, request, access_token)
    if outcome.remember_token:
        set_remember_cookie(response, request, outcome.remember_token)

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": user.role,
    }


@router.post("/logout")
def logout(
    response: Response,
    context: SessionContext = Depends(get_session_context),
    session: Session = Depends(get_session),
):
    if context.authenticated:
        unwrap(auth_service.logout_user(session, context.user.id))
    clear_session_cookies(response)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserPublic)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/forgot-password")
def forgot_password(payload: ForgotPasswordRequest, session: Session = Depends(get_session)):
    result = auth_service.request_password_reset(session, payload.email)
    # não revela se o email existe; o token só sai pelo email
    if not result.ok and result.kind == ErrorKind.PERSISTENCE:
        unwrap(result)
    return {"message": "If the email is registered, a password reset link has been sent"}


@router.post("/reset-password")
def reset_password(payload: ResetPasswordRequest, session: Session = Depends(get_session)):
    unwrap(auth_service.reset_password(session, payload.token, payload.new_password))
    return {"message": "Password reset successful"}
