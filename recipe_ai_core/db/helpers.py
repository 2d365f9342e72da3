"""
Funciones helper para usuarios: registro, login, perfil, reseteo de
contraseña y administración.

Como en `recipes.py`, nada de esto hace commit: la sesión la cierra quien llama.
"""

from __future__ import annotations

import logging
import re
import smtplib
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import get_settings
from ..errors import AuthenticationError, ConflictError, NotFoundError
from ..mailer import notify_admins_new_user, send_password_reset
from ..security import (
    generate_password,
    generate_reset_token,
    gravatar_url,
    hash_password,
    verify_password,
)
from .models import Rating, Recipe, User, utcnow
from .recipes import recompute_rating

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_PASSWORD_LENGTH = 6
MIN_DISPLAY_NAME_LENGTH = 2
THEMES = ("light", "dark")
DEFAULT_ADMIN_EMAIL = "admin@example.com"

PASSWORD_RESET_MESSAGE = "If an account with that email exists, a password reset link has been sent."


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_email(email: str) -> str:
    normalized = _normalize_email(email)
    if not _EMAIL_RE.match(normalized):
        raise ValueError("Email inválido")
    return normalized


def validate_password(password: str) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres")
    return password


def user_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "is_approved": user.is_approved,
        "roles": user.role_list,
        "theme": user.theme,
        "gravatar_url": gravatar_url(user.email),
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def get_user_by_id(session: Session, user_id: str) -> Optional[User]:
    return session.get(User, user_id)


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.execute(select(User).where(User.email == _normalize_email(email))).scalar_one_or_none()


def list_admins(session: Session) -> List[User]:
    users = session.execute(select(User)).scalars().all()
    return [u for u in users if u.is_admin]


# ============================================================
# Registro y login
# ============================================================

def create_user(
    session: Session,
    email: str,
    password: str,
    display_name: Optional[str] = None,
    roles: str = "user",
    is_approved: bool = False,
) -> User:
    """
    Crea un usuario local.

    Raises
    ------
    ValueError
        Email inválido, contraseña corta o display name de menos de 2 caracteres.
    ConflictError
        Si el email ya está registrado (`auth/email-already-in-use`).
    """
    normalized = validate_email(email)
    validate_password(password)
    name = (display_name or "").strip() or None
    if name is not None and len(name) < MIN_DISPLAY_NAME_LENGTH:
        raise ValueError(f"El nombre debe tener al menos {MIN_DISPLAY_NAME_LENGTH} caracteres")

    if get_user_by_email(session, normalized) is not None:
        raise ConflictError("auth/email-already-in-use")

    user = User(
        email=normalized,
        display_name=name,
        password_hash=hash_password(password),
        roles=roles,
        is_approved=is_approved,
    )
    session.add(user)
    session.flush()
    return user


def signup_user(session: Session, email: str, password: str, display_name: Optional[str] = None) -> User:
    """
    Registro público: el usuario queda pendiente de aprobación y se avisa a los admins.
    """
    user = create_user(session, email, password, display_name)
    admin_emails = [a.email for a in list_admins(session)]
    if admin_emails:
        sent = notify_admins_new_user(admin_emails, user.email, user.display_name)
        logger.info(f"Nuevo usuario {user.email}: {sent}/{len(admin_emails)} admins notificados")
    else:
        logger.warning(f"Nuevo usuario {user.email} pero no hay admins para notificar")
    return user


def authenticate_user(session: Session, email: str, password: str) -> User:
    """
    Raises
    ------
    AuthenticationError
        Si el email no existe o la contraseña no coincide.
    """
    user = get_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Email o contraseña incorrectos")
    return user


# ============================================================
# Reseteo de contraseña
# ============================================================

def request_password_reset(session: Session, email: str) -> Optional[str]:
    """
    Genera un token de reseteo y envía el link por email.

    Devuelve el token (o None si el usuario no existe). La API siempre
    responde el mismo mensaje genérico para no revelar qué emails existen.
    """
    user = get_user_by_email(session, email)
    if user is None:
        logger.info("Pedido de reseteo para email inexistente")
        return None

    settings = get_settings()
    token = generate_reset_token()
    user.reset_token = token
    user.reset_token_expiry = utcnow() + timedelta(minutes=settings.reset_token_ttl_minutes)
    session.flush()

    try:
        send_password_reset(user.email, token)
    except (smtplib.SMTPException, OSError):
        logger.exception(f"No se pudo enviar el email de reseteo a {user.email}")
    return token


def reset_password(session: Session, token: str, new_password: str) -> User:
    """
    Raises
    ------
    ValueError
        Token inexistente/expirado o contraseña inválida.
    """
    validate_password(new_password)
    user = None
    if token:
        user = session.execute(select(User).where(User.reset_token == token)).scalar_one_or_none()
    if user is None or user.reset_token_expiry is None or user.reset_token_expiry <= utcnow():
        raise ValueError("Token de reseteo inválido o expirado")

    user.password_hash = hash_password(new_password)
    user.reset_token = None
    user.reset_token_expiry = None
    session.flush()
    return user


# ============================================================
# Perfil
# ============================================================

def update_profile(
    session: Session,
    user: User,
    display_name: Optional[str] = None,
    email: Optional[str] = None,
    new_password: Optional[str] = None,
    current_password: Optional[str] = None,
) -> User:
    """
    Actualiza nombre, email y/o contraseña.

    Cambiar email o contraseña exige la contraseña actual.

    Raises
    ------
    ValueError
        Falta la contraseña actual o algún valor es inválido.
    AuthenticationError
        La contraseña actual no coincide.
    ConflictError
        El nuevo email ya pertenece a otro usuario.
    """
    new_email = validate_email(email) if email else None
    changing_email = new_email is not None and new_email != user.email
    changing_password = bool(new_password)

    if changing_email or changing_password:
        if not current_password:
            raise ValueError("Se requiere la contraseña actual")
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("La contraseña actual es incorrecta")

    if display_name is not None:
        name = display_name.strip()
        if name and len(name) < MIN_DISPLAY_NAME_LENGTH:
            raise ValueError(f"El nombre debe tener al menos {MIN_DISPLAY_NAME_LENGTH} caracteres")
        user.display_name = name or None

    if changing_email:
        other = get_user_by_email(session, new_email)
        if other is not None and other.id != user.id:
            raise ConflictError("auth/email-already-in-use")
        user.email = new_email

    if changing_password:
        user.password_hash = hash_password(validate_password(new_password))

    session.flush()
    return user


def update_theme(session: Session, user: User, theme: str) -> User:
    if theme not in THEMES:
        raise ValueError("Tema inválido: debe ser 'light' o 'dark'")
    user.theme = theme
    session.flush()
    return user


# ============================================================
# Administración
# ============================================================

def list_users(session: Session) -> List[User]:
    return list(session.execute(select(User).order_by(User.created_at.desc())).scalars().all())


def _get_user_or_404(session: Session, user_id: str) -> User:
    user = get_user_by_id(session, user_id)
    if user is None:
        raise NotFoundError(f"Usuario no encontrado: {user_id}")
    return user


def approve_user(session: Session, user_id: str) -> User:
    user = _get_user_or_404(session, user_id)
    user.is_approved = True
    session.flush()
    logger.info(f"Usuario aprobado: {user.email}")
    return user


def set_user_roles(session: Session, user_id: str, roles: Any) -> User:
    """
    Raises
    ------
    ValueError
        Si `roles` no es una lista de strings.
    """
    if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
        raise ValueError("new_roles debe ser una lista de strings")
    user = _get_user_or_404(session, user_id)
    cleaned: List[str] = []
    for role in roles:
        role = role.strip()
        if role and role not in cleaned:
            cleaned.append(role)
    user.roles = ",".join(cleaned)
    session.flush()
    return user


def delete_user(session: Session, user_id: str) -> None:
    """
    Borra un usuario. Sus recetas quedan sin creador (`created_by = NULL`) y
    sus valoraciones se eliminan (recalculando los promedios afectados).
    """
    user = _get_user_or_404(session, user_id)
    rated_ids = [rid for (rid,) in session.execute(select(Rating.recipe_id).where(Rating.user_id == user.id)).all()]

    for recipe in session.execute(select(Recipe).where(Recipe.created_by == user.id)).scalars():
        recipe.created_by = None
    session.delete(user)
    session.flush()

    for recipe in session.execute(select(Recipe).where(Recipe.id.in_(rated_ids))).scalars():
        session.refresh(recipe)
        recompute_rating(session, recipe)
    session.flush()
    logger.info(f"Usuario borrado: {user_id}")


def seed_admin(session: Session, email: str = DEFAULT_ADMIN_EMAIL) -> Optional[Tuple[User, str]]:
    """
    Crea un admin inicial con contraseña aleatoria de 8 caracteres.

    Devuelve (usuario, contraseña) o None si ya existe algún admin.
    """
    if list_admins(session):
        return None
    password = generate_password(8)
    user = create_user(session, email, password, display_name="Admin", roles="admin", is_approved=True)
    return user, password
