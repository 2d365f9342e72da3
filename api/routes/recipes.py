"""
Endpoints de recetas.

Este módulo maneja:
- Listado con filtros (visibilidad, categoría/tag, término) y catálogo de etiquetas
- CRUD de recetas con permisos (pública / propia / admin)
- Valoraciones
- Vista escalada a otro número de porciones
- Reordenamiento de secciones (drag-and-drop)
- Links compartidos temporales
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

import logging

from recipe_ai_core.db.models import User
from recipe_ai_core.db.recipes import (
    create_recipe,
    create_share_token,
    delete_recipe,
    get_recipe_by_share_token,
    get_recipe_for_user,
    list_recipes_for_user,
    list_share_tokens,
    rate_recipe,
    recipe_to_dict,
    reorder_recipe_items,
    revoke_share_token,
    share_token_to_dict,
    update_recipe,
)
from recipe_ai_core.domains.recipes.normalize import normalize_recipe_payload
from recipe_ai_core.domains.recipes.scaling import DEFAULT_LANG, parse_servings_input, scale_groups
from recipe_ai_core.domains.recipes.search import collect_labels, filter_recipes
from recipe_ai_core.errors import RecipeAppError

from ..dependencies import get_current_user, get_db, get_optional_user, http_error
from ..models.requests import RateRequest, RecipeIn, ReorderRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["recipes"])


def _viewer_id(user: Optional[User]) -> Optional[str]:
    return user.id if user else None


@router.get("/recipes")
async def get_recipes(
    visibility: str = Query("all-viewable", description="all-viewable | my-all | my-public | my-private | community-public"),
    category: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Término de búsqueda"),
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    Lista recetas visibles (públicas + propias). Usuarios anónimos o no
    aprobados reciben una lista vacía.
    """
    recipes = [recipe_to_dict(r, _viewer_id(user)) for r in list_recipes_for_user(db, user)]
    try:
        return filter_recipes(recipes, _viewer_id(user), visibility=visibility, category=category, tag=tag, term=q)
    except ValueError as e:
        raise http_error(e) from e


@router.get("/recipes/catalog")
async def get_catalog(user: Optional[User] = Depends(get_optional_user), db: Session = Depends(get_db)):
    """Tags y categorías distintas de las recetas visibles."""
    recipes = [recipe_to_dict(r, _viewer_id(user)) for r in list_recipes_for_user(db, user)]
    return collect_labels(recipes)


@router.post("/recipes", status_code=201)
async def post_recipe(request: RecipeIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        data = normalize_recipe_payload(request.model_dump(mode="json"))
        recipe = create_recipe(db, user, data)
        return recipe_to_dict(recipe, user.id)
    except HTTPException:
        raise
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    except Exception as e:
        logger.exception(f"Error creando receta: {e}")
        raise HTTPException(status_code=500, detail="Error creating recipe") from e


@router.get("/recipes/{recipe_id}")
async def get_recipe(
    recipe_id: str,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    try:
        recipe = get_recipe_for_user(db, recipe_id, user)
    except RecipeAppError as e:
        raise http_error(e) from e
    return recipe_to_dict(recipe, _viewer_id(user))


@router.put("/recipes/{recipe_id}")
async def put_recipe(
    recipe_id: str,
    request: RecipeIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Reemplaza la receta completa (solo el creador). Los arrays anidados se
    borran y recrean dentro de la misma transacción.
    """
    try:
        data = normalize_recipe_payload(request.model_dump(mode="json"))
        recipe = update_recipe(db, recipe_id, user, data)
        return recipe_to_dict(recipe, user.id)
    except HTTPException:
        raise
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    except Exception as e:
        logger.exception(f"Error actualizando receta {recipe_id}: {e}")
        raise HTTPException(status_code=500, detail="Error updating recipe") from e


@router.delete("/recipes/{recipe_id}", status_code=204)
async def remove_recipe(recipe_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        delete_recipe(db, recipe_id, user)
    except RecipeAppError as e:
        raise http_error(e) from e
    return Response(status_code=204)


@router.post("/recipes/{recipe_id}/rate")
async def post_rating(
    recipe_id: str,
    request: RateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Valora una receta (1..5) o borra la valoración propia (0).
    El usuario siempre es el autenticado.
    """
    try:
        recipe = rate_recipe(db, recipe_id, user, request.rating)
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    return {
        "message": "Rating updated successfully",
        "average_rating": recipe.average_rating,
        "num_ratings": recipe.num_ratings,
        "my_rating": request.rating or None,
    }


@router.get("/recipes/{recipe_id}/scaled")
async def get_scaled_recipe(
    recipe_id: str,
    servings: str = Query(..., description="Porciones destino (acepta coma decimal)"),
    lang: str = Query(DEFAULT_LANG, description="Idioma para el separador decimal"),
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    try:
        target = parse_servings_input(servings)
        recipe = get_recipe_for_user(db, recipe_id, user)
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e

    data = recipe_to_dict(recipe, _viewer_id(user))
    data["ingredient_groups"] = scale_groups(data["ingredient_groups"], recipe.servings_value, target, lang)
    data["original_servings_value"] = recipe.servings_value
    data["servings_value"] = target
    return data


@router.post("/recipes/{recipe_id}/reorder")
async def post_reorder(
    recipe_id: str,
    request: ReorderRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        recipe = reorder_recipe_items(
            db,
            recipe_id,
            user,
            request.section.value,
            request.from_index,
            request.to_index,
            request.group_index,
            request.to_group_index,
        )
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    return recipe_to_dict(recipe, user.id)


# ============================================================
# Links compartidos
# ============================================================

@router.post("/recipes/{recipe_id}/share", status_code=201)
async def post_share(recipe_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        token = create_share_token(db, recipe_id, user)
    except RecipeAppError as e:
        raise http_error(e) from e
    return share_token_to_dict(token)


@router.get("/recipes/{recipe_id}/share")
async def get_shares(recipe_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        tokens = list_share_tokens(db, recipe_id, user)
    except RecipeAppError as e:
        raise http_error(e) from e
    return [share_token_to_dict(t) for t in tokens]


@router.delete("/recipes/{recipe_id}/share/{token}", status_code=204)
async def delete_share(
    recipe_id: str,
    token: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        revoke_share_token(db, recipe_id, user, token)
    except RecipeAppError as e:
        raise http_error(e) from e
    return Response(status_code=204)


@router.get("/shared/{token}")
async def get_shared_recipe(token: str, db: Session = Depends(get_db)):
    """Lectura pública de una receta a través de un link compartido vigente."""
    try:
        recipe = get_recipe_by_share_token(db, token)
    except RecipeAppError as e:
        raise http_error(e) from e
    return recipe_to_dict(recipe)
