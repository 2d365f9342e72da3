"""
Endpoints del usuario autenticado.

- PUT /api/v1/user/profile: nombre, email, contraseña
- PUT /api/v1/user/theme: tema de la UI (light | dark)
- GET /api/v1/user/status: estado de aprobación
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from recipe_ai_core.db.helpers import update_profile, update_theme, user_to_dict
from recipe_ai_core.db.models import User
from recipe_ai_core.errors import RecipeAppError

from ..dependencies import get_current_user, get_db, http_error
from ..models.requests import ProfileUpdateRequest, ThemeRequest

router = APIRouter(prefix="/api/v1/user", tags=["user"])


@router.put("/profile")
async def put_profile(
    request: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Actualiza el perfil.

    Errores:
        400: falta la contraseña actual para cambiar email/contraseña
        401: contraseña actual incorrecta
        409: email ya usado por otra cuenta
    """
    try:
        update_profile(
            db,
            user,
            display_name=request.display_name,
            email=request.email,
            new_password=request.new_password,
            current_password=request.current_password,
        )
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    return {"message": "Profile updated successfully", "user": user_to_dict(user)}


@router.put("/theme")
async def put_theme(
    request: ThemeRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        update_theme(db, user, request.theme)
    except ValueError as e:
        raise http_error(e) from e
    return {"message": "Theme updated successfully", "theme": user.theme}


@router.get("/status")
async def get_status(user: User = Depends(get_current_user)):
    return {"is_approved": user.is_approved}
