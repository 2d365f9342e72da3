"""
Dependencias de FastAPI para base de datos, autenticación y autorización.

Este módulo proporciona dependencias reutilizables para:
- Obtener una sesión de base de datos por request
- Obtener el usuario actual desde el token JWT (Bearer)
- Exigir usuario aprobado o rol admin
- Traducir errores de dominio a HTTPException
"""

from typing import Generator, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from recipe_ai_core.db.database import get_db_engine
from recipe_ai_core.db.helpers import get_user_by_id
from recipe_ai_core.db.models import User
from recipe_ai_core.errors import (
    AIServiceError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from recipe_ai_core.security import decode_access_token

import logging

logger = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    """
    Dependencia de FastAPI para obtener una sesión de base de datos.

    Commit si el endpoint termina bien, rollback ante cualquier excepción
    (incluida HTTPException), cierre siempre.
    """
    get_db_engine(echo=False)
    from recipe_ai_core.db.database import SessionLocal
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def _token_from_header(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Invalid Authorization header format. Expected 'Bearer <token>'",
        )
    return authorization.replace("Bearer ", "", 1).strip() or None


def get_optional_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Usuario actual si hay token válido; None si no hay header.

    Un token presente pero inválido o de un usuario borrado da 401.
    """
    token = _token_from_header(authorization)
    if token is None:
        return None

    try:
        payload = decode_access_token(token)
    except AuthenticationError as e:
        logger.warning(f"Token rechazado: {e}")
        raise HTTPException(status_code=401, detail=str(e)) from e

    user = get_user_by_id(db, payload["sub"])
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """
    Exige un usuario autenticado.

    Raises:
        HTTPException 401: si no hay token.
    """
    if user is None:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    return user


def require_approved_user(user: User = Depends(get_current_user)) -> User:
    if not user.is_approved:
        raise HTTPException(status_code=403, detail="Your account is pending approval")
    return user


def require_admin(user: Optional[User] = Depends(get_optional_user)) -> User:
    """
    Exige rol admin. Los no-admins reciben 401 (no 403).
    """
    if user is None or not user.is_admin:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def http_error(exc: Exception) -> HTTPException:
    """
    Traduce errores de dominio del core a HTTPException.
    """
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, PermissionDeniedError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, AuthenticationError):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, AIServiceError):
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    logger.exception(f"Error inesperado: {exc}")
    return HTTPException(status_code=500, detail="Internal server error")
