"""Error taxonomy and the tagged result returned by every service operation.

Services raise :class:`PortalError` subclasses internally; the
:func:`service_operation` decorator is the boundary that turns them (and any
database failure) into a :class:`Failure`, so nothing reaches the caller as an
unhandled fault. Routers call :func:`unwrap` to map a failure onto an HTTP
status.
"""
import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, TypeVar, Union

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"


class PortalError(Exception):
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, errors: List[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


class ValidationError(PortalError):
    kind = ErrorKind.VALIDATION


class NotFoundError(PortalError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(PortalError):
    kind = ErrorKind.CONFLICT


class PersistenceError(PortalError):
    kind = ErrorKind.PERSISTENCE


class AuthenticationError(PortalError):
    kind = ErrorKind.UNAUTHORIZED


class PermissionDeniedError(PortalError):
    kind = ErrorKind.FORBIDDEN


ERRORS_BY_KIND = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.CONFLICT: ConflictError,
    ErrorKind.PERSISTENCE: PersistenceError,
    ErrorKind.UNAUTHORIZED: AuthenticationError,
    ErrorKind.FORBIDDEN: PermissionDeniedError,
}


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    errors: List[str] = field(default_factory=list)
    ok: bool = field(default=False, init=False)


Result = Union[Success[T], Failure]


def service_operation(failure_message: str):
    """Wrap a service function taking the db session as first argument.

    The return value becomes ``Success(value)``. A ``PortalError`` becomes a
    ``Failure`` of the same kind; a ``SQLAlchemyError`` is logged and becomes
    a ``PERSISTENCE`` failure carrying ``failure_message`` only. The session
    is rolled back in both cases.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(session, *args, **kwargs):
            try:
                return Success(func(session, *args, **kwargs))
            except PortalError as exc:
                session.rollback()
                logger.info("%s rejected: %s", func.__name__, exc.message)
                return Failure(exc.kind, exc.message, exc.errors)
            except SQLAlchemyError:
                session.rollback()
                logger.exception("%s failed", func.__name__)
                return Failure(ErrorKind.PERSISTENCE, failure_message)

        return wrapper

    return decorator


HTTP_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.PERSISTENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
}


def unwrap(result: Result):
    if result.ok:
        return result.value

    # lista de erros quando houver mais de uma mensagem (validação de agendamento)
    detail = result.errors if result.errors else result.message
    raise HTTPException(status_code=HTTP_STATUS_BY_KIND[result.kind], detail=detail)
