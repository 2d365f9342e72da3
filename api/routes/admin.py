"""
Endpoints de administración de usuarios (solo admins).

- GET    /api/v1/admin/users
- PUT    /api/v1/admin/users/{user_id}/approve
- PUT    /api/v1/admin/users/{user_id}/roles
- DELETE /api/v1/admin/users/{user_id}
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import logging

from recipe_ai_core.db.helpers import approve_user, delete_user, list_users, set_user_roles, user_to_dict
from recipe_ai_core.db.models import User
from recipe_ai_core.errors import RecipeAppError

from ..dependencies import get_db, http_error, require_admin
from ..models.requests import RolesRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/users")
async def get_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Lista todos los usuarios, los más nuevos primero."""
    return [user_to_dict(u) for u in list_users(db)]


@router.put("/users/{user_id}/approve")
async def put_approve(user_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        user = approve_user(db, user_id)
    except RecipeAppError as e:
        raise http_error(e) from e
    return {"message": "User approved successfully", "user": user_to_dict(user)}


@router.put("/users/{user_id}/roles")
async def put_roles(
    user_id: str,
    request: RolesRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        user = set_user_roles(db, user_id, request.new_roles)
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    logger.info(f"Roles de {user.email} actualizados por {admin.email}: {user.roles}")
    return {"message": "User roles updated successfully", "user": user_to_dict(user)}


@router.delete("/users/{user_id}")
async def remove_user(user_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        delete_user(db, user_id)
    except RecipeAppError as e:
        raise http_error(e) from e
    return {"message": "User deleted successfully"}
