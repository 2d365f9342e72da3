"""
Endpoints de la lista de compras del usuario autenticado.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from recipe_ai_core.db.models import User
from recipe_ai_core.db.shopping import (
    add_from_recipe,
    add_item,
    add_items,
    clear_items,
    item_to_dict,
    list_items,
    remove_item,
    toggle_item,
)
from recipe_ai_core.domains.recipes.scaling import parse_servings_input
from recipe_ai_core.errors import RecipeAppError

from ..dependencies import get_current_user, get_db, http_error
from ..models.requests import FromRecipeRequest, ShoppingBulkRequest, ShoppingItemIn

router = APIRouter(prefix="/api/v1/shopping-list", tags=["shopping-list"])


@router.get("")
async def get_items(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [item_to_dict(i) for i in list_items(db, user)]


@router.post("", status_code=201)
async def post_item(request: ShoppingItemIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        item = add_item(db, user, request.name, request.quantity or "", request.unit or "")
    except ValueError as e:
        raise http_error(e) from e
    return item_to_dict(item)


@router.post("/bulk", status_code=201)
async def post_bulk(request: ShoppingBulkRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    created = add_items(db, user, [i.model_dump() for i in request.items])
    return [item_to_dict(i) for i in created]


@router.post("/from-recipe/{recipe_id}", status_code=201)
async def post_from_recipe(
    recipe_id: str,
    request: FromRecipeRequest | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Agrega los ingredientes de una receta, escalados si viene `servings`.
    """
    request = request or FromRecipeRequest()
    try:
        servings = parse_servings_input(request.servings) if request.servings not in (None, "") else None
        created = add_from_recipe(db, user, recipe_id, servings=servings, lang=request.lang)
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    return [item_to_dict(i) for i in created]


@router.patch("/{item_id}/toggle")
async def patch_toggle(item_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        item = toggle_item(db, user, item_id)
    except RecipeAppError as e:
        raise http_error(e) from e
    return item_to_dict(item)


@router.delete("/{item_id}", status_code=204)
async def delete_item(item_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        remove_item(db, user, item_id)
    except RecipeAppError as e:
        raise http_error(e) from e
    return Response(status_code=204)


@router.delete("")
async def delete_items(
    checked_only: bool = Query(False, description="Borrar solo los ítems tildados"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    removed = clear_items(db, user, checked_only=checked_only)
    return {"message": "Shopping list cleared", "removed": removed}
