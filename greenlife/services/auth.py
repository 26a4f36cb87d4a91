"""Registration, login, remember-me and password reset."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session, select

from greenlife.core.config import REMEMBER_TOKEN_DAYS, RESET_TOKEN_MINUTES
from greenlife.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    service_operation,
)
from greenlife.core.security import (
    PASSWORD_RULES_MESSAGE,
    generate_token,
    get_password_hash,
    hash_token,
    is_strong_password,
    verify_password,
)
from greenlife.models.therapist import Therapist
from greenlife.models.user import User
from greenlife.services.notifications import send_password_reset_email, send_welcome_email

logger = logging.getLogger(__name__)


@dataclass
class LoginOutcome:
    user: User
    remember_token: Optional[str] = None


def get_active_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(
        select(User).where(User.email == email, User.status == "active")
    ).first()


# =========================
# CADASTRO
# =========================

@service_operation("Registration failed")
def register_user(
    session: Session,
    name: str,
    email: str,
    password: str,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    role: str = "client",
    specialization: Optional[str] = None,
    bio: Optional[str] = None,
    experience_years: int = 0,
) -> User:
    # email é único mesmo entre contas inativas
    if session.exec(select(User).where(User.email == email)).first():
        raise ConflictError("Email already exists")

    if not is_strong_password(password):
        raise ValidationError(PASSWORD_RULES_MESSAGE)

    # usuário + terapeuta na mesma transação
    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        role=role,
        phone=phone,
        address=address,
    )
    session.add(user)
    session.flush()

    if role == "therapist":
        session.add(
            Therapist(
                user_id=user.id,
                name=name,
                specialization=specialization,
                bio=bio,
                experience_years=experience_years,
                status="active",
            )
        )
        session.flush()

    session.commit()
    session.refresh(user)
    logger.info("Registered user %s with role %s", user.id, role)

    send_welcome_email(session, user.email, user.name)
    return user


# =========================
# LOGIN / LOGOUT
# =========================

@service_operation("Login failed")
def login_user(
    session: Session, email: str, password: str, remember: bool = False, now: Optional[datetime] = None
) -> LoginOutcome:
    now = now or datetime.utcnow()

    user = get_active_user_by_email(session, email)
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    outcome = LoginOutcome(user=user)
    if remember:
        token = generate_token()
        user.remember_token = hash_token(token)
        user.remember_expires = now + timedelta(days=REMEMBER_TOKEN_DAYS)
        outcome.remember_token = token

    user.last_login = now
    session.add(user)
    session.commit()
    session.refresh(user)
    return outcome


@service_operation("Session restore failed")
def restore_remembered_session(session: Session, token: str, now: Optional[datetime] = None) -> User:
    """Log a user back in from a remember-me token and slide its expiry."""
    now = now or datetime.utcnow()

    user = session.exec(
        select(User).where(
            User.remember_token == hash_token(token),
            User.remember_expires > now,
            User.status == "active",
        )
    ).first()
    if not user:
        raise AuthenticationError("Invalid or expired remember token")

    user.remember_expires = now + timedelta(days=REMEMBER_TOKEN_DAYS)
    user.last_login = now
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@service_operation("Logout failed")
def logout_user(session: Session, user_id: int) -> None:
    user = session.get(User, user_id)
    if not user:
        return None

    user.remember_token = None
    user.remember_expires = None
    user.session_version += 1
    session.add(user)
    session.commit()
    return None


# =========================
# RESET DE SENHA
# =========================

@service_operation("Reset failed")
def request_password_reset(session: Session, email: str, now: Optional[datetime] = None) -> str:
    """Issue a one-hour reset token, replacing any previous one.

    The raw token goes out through the email stub and is returned to the
    caller; only its hash is stored.
    """
    now = now or datetime.utcnow()

    user = get_active_user_by_email(session, email)
    if not user:
        raise NotFoundError("Email not found")

    token = generate_token()
    user.reset_token = hash_token(token)
    user.reset_expires = now + timedelta(minutes=RESET_TOKEN_MINUTES)
    session.add(user)
    session.commit()

    send_password_reset_email(session, user.email, user.name, token)
    return token


@service_operation("Reset failed")
def reset_password(session: Session, token: str, new_password: str, now: Optional[datetime] = None) -> User:
    now = now or datetime.utcnow()

    if not is_strong_password(new_password):
        raise ValidationError(PASSWORD_RULES_MESSAGE)

    user = session.exec(
        select(User).where(User.reset_token == hash_token(token), User.reset_expires > now)
    ).first()
    if not user:
        raise ValidationError("Invalid or expired reset token")

    user.password_hash = get_password_hash(new_password)
    user.reset_token = None
    user.reset_expires = None
    # senha nova derruba sessões lembradas e tokens de acesso emitidos
    user.remember_token = None
    user.remember_expires = None
    user.session_version += 1
    session.add(user)
    session.commit()
    session.refresh(user)
    return user
