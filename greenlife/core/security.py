import hashlib
import re
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlmodel import Session, select

from greenlife.core.config import (
    ACCESS_COOKIE_NAME,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ALGORITHM,
    REMEMBER_COOKIE_NAME,
    REMEMBER_TOKEN_DAYS,
    SECRET_KEY,
)
from greenlife.database import get_session
from greenlife.models.user import User


# =========================
# HASH DE SENHA
# =========================

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_ALLOWED = re.compile(r"^[a-zA-Z0-9@$!%*?&._-]+$")
PASSWORD_RULES_MESSAGE = "Password must be at least 8 characters with uppercase, lowercase, and number"


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def is_strong_password(password: str) -> bool:
    return (
        len(password) >= 8
        and re.search(r"[a-z]", password) is not None
        and re.search(r"[A-Z]", password) is not None
        and re.search(r"[0-9]", password) is not None
        and PASSWORD_ALLOWED.match(password) is not None
    )


def generate_random_password(length: int = 12) -> str:
    # garante pelo menos uma minúscula, uma maiúscula e um dígito
    alphabet = string.ascii_letters + string.digits + "@$!%*?&"
    while True:
        password = "".join(secrets.choice(alphabet) for _ in range(length))
        if is_strong_password(password):
            return password


# =========================
# TOKENS OPACOS (remember / reset)
# =========================

def generate_token() -> str:
    """256 bits aleatórios em 64 caracteres hex."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


# =========================
# TOKEN JWT
# =========================

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_session_token(user: User) -> str:
    return create_access_token(
        data={"sub": str(user.id), "role": user.role, "ver": user.session_version}
    )


# =========================
# COOKIES
# =========================

def set_access_cookie(response: Response, request: Request, token: str) -> None:
    response.set_cookie(
        ACCESS_COOKIE_NAME,
        token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="lax",
    )


def set_remember_cookie(response: Response, request: Request, token: str) -> None:
    response.set_cookie(
        REMEMBER_COOKIE_NAME,
        token,
        max_age=REMEMBER_TOKEN_DAYS * 24 * 60 * 60,
        path="/",
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="lax",
    )


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_COOKIE_NAME, path="/")
    response.delete_cookie(REMEMBER_COOKIE_NAME, path="/")


# =========================
# CONTEXTO DE SESSÃO
# =========================

@dataclass
class SessionContext:
    """Who is making the request, resolved once per request.

    ``user`` is None for anonymous requests. ``restored`` is True when the
    session was rebuilt from the remember-me cookie instead of an access
    token; in that case a fresh access token has been issued as a cookie.
    """

    user: Optional[User] = None
    restored: bool = False

    @property
    def authenticated(self) -> bool:
        return self.user is not None

    @property
    def role(self) -> Optional[str]:
        return self.user.role if self.user else None


def _user_from_access_token(session: Session, token: str) -> Optional[User]:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = int(payload.get("sub"))
        version = payload.get("ver")
    except (JWTError, TypeError, ValueError):
        return None

    user = session.get(User, user_id)
    if user is None or user.status != "active" or user.session_version != version:
        return None
    return user


def get_session_context(
    request: Request,
    response: Response,
    token: Optional[str] = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> SessionContext:
    # import local: services.auth depende deste módulo
    from greenlife.services.auth import restore_remembered_session

    token = token or request.cookies.get(ACCESS_COOKIE_NAME)
    if token:
        user = _user_from_access_token(session, token)
        if user is not None:
            return SessionContext(user=user)

    remember = request.cookies.get(REMEMBER_COOKIE_NAME)
    if not remember:
        return SessionContext()

    result = restore_remembered_session(session, remember)
    if not result.ok:
        response.delete_cookie(REMEMBER_COOKIE_NAME, path="/")
        return SessionContext()

    user = result.value
    set_remember_cookie(response, request, remember)
    set_access_cookie(response, request, create_session_token(user))
    return SessionContext(user=user, restored=True)


# =========================
# USUÁRIO AUTENTICADO
# =========================

def get_current_user(context: SessionContext = Depends(get_session_context)) -> User:
    if not context.authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return context.user


def require_role(*roles: str):
    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        return current_user

    return dependency


# =========================
# SOMENTE ADMIN / TERAPEUTA
# =========================

get_current_admin = require_role("admin")
get_current_therapist = require_role("therapist")
get_current_staff = require_role("admin", "therapist")
