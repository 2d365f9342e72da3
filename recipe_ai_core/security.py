"""
recipe_ai_core.security
=======================

Primitivas de autenticación local:
- Hash/verificación de contraseñas con bcrypt.
- Emisión/validación de tokens de sesión (JWT HS256 con PyJWT).
- Tokens aleatorios para reseteo de contraseña y links compartidos.
- URL de avatar de Gravatar.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import bcrypt
import jwt  # pyjwt

from .config import get_settings
from .errors import AuthenticationError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Compara una contraseña en texto plano contra su hash bcrypt.

    Un hash vacío o corrupto nunca valida (devuelve False en vez de lanzar).
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Hash de contraseña inválido en la base")
        return False


def create_access_token(
    user_id: str,
    roles: List[str],
    is_approved: bool,
    expires_minutes: int | None = None,
) -> str:
    """
    Firma un JWT de sesión.

    Claims: sub, roles, is_approved, iat, exp, jti.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.jwt_expire_minutes
    payload = {
        "sub": user_id,
        "roles": roles,
        "is_approved": bool(is_approved),
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Valida firma y expiración de un JWT de sesión.

    Raises
    ------
    AuthenticationError
        Si el token expiró, es inválido o no trae `sub`.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token expirado") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Token inválido") from e

    if not payload.get("sub"):
        raise AuthenticationError("Token sin sujeto")
    return payload


def generate_reset_token() -> str:
    """Token hex de 32 bytes (64 caracteres)."""
    return secrets.token_hex(32)


def generate_share_token() -> str:
    return secrets.token_urlsafe(24)


def generate_password(length: int = 8) -> str:
    alphabet = "abcdefghijkmnpqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ23456789"
    return "".join(secrets.choice(alphabet) for _ in range(length))


def gravatar_url(email: str, size: int = 128) -> str:
    digest = hashlib.md5((email or "").strip().lower().encode("utf-8")).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?s={size}&d=identicon"
