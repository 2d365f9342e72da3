"""
Endpoints de autenticación local (email + contraseña).

Este módulo maneja:
- Registro (queda pendiente de aprobación)
- Login (emite JWT)
- Usuario autenticado (/me)
- Olvido y reseteo de contraseña
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

import logging

from recipe_ai_core.db.helpers import (
    PASSWORD_RESET_MESSAGE,
    authenticate_user,
    request_password_reset,
    reset_password,
    signup_user,
    user_to_dict,
)
from recipe_ai_core.db.models import User
from recipe_ai_core.errors import RecipeAppError
from recipe_ai_core.security import create_access_token

from ..dependencies import get_current_user, get_db, http_error
from ..models.requests import ForgotPasswordRequest, LoginRequest, ResetPasswordRequest, SignupRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/signup", status_code=201)
async def signup(request: SignupRequest, db: Session = Depends(get_db)):
    """
    Registra un usuario nuevo. No queda aprobado: un admin debe aprobarlo.

    Errores:
        400: datos inválidos
        409: email ya registrado (`auth/email-already-in-use`)
    """
    try:
        user = signup_user(db, request.email, request.password, request.display_name)
        logger.info(f"Usuario registrado: {user.email}")
        return {
            "message": "Account created. An administrator must approve it before you can use the app.",
            "user": user_to_dict(user),
        }
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e


@router.post("/login")
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = authenticate_user(db, request.email, request.password)
    except RecipeAppError as e:
        raise http_error(e) from e

    token = create_access_token(user.id, user.role_list, user.is_approved)
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": user_to_dict(user),
    }


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return user_to_dict(user)


@router.post("/forgot-password")
async def forgot_password(request: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """
    Siempre responde el mismo mensaje, exista o no el email.
    """
    try:
        request_password_reset(db, request.email)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error generando token de reseteo: {e}")
        raise HTTPException(status_code=500, detail="Error processing the request") from e
    return {"message": PASSWORD_RESET_MESSAGE}


@router.put("/reset-password")
async def put_reset_password(request: ResetPasswordRequest, db: Session = Depends(get_db)):
    try:
        reset_password(db, request.token, request.new_password)
    except ValueError as e:
        raise http_error(e) from e
    return {"message": "Password has been reset successfully."}
