"""
Lista de compras por usuario (persistida en el servidor).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..domains.recipes.scaling import scale_quantity
from ..errors import NotFoundError
from .models import ShoppingListItem, User
from .recipes import get_recipe_for_user

logger = logging.getLogger(__name__)


def item_to_dict(item: ShoppingListItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "quantity": item.quantity,
        "unit": item.unit,
        "is_checked": item.is_checked,
        "recipe_id": item.recipe_id,
        "recipe_title": item.recipe_title,
        "created_at": item.created_at.isoformat() if item.created_at else None,
    }


def list_items(session: Session, user: User) -> List[ShoppingListItem]:
    stmt = (
        select(ShoppingListItem)
        .where(ShoppingListItem.user_id == user.id)
        .order_by(ShoppingListItem.position.asc(), ShoppingListItem.created_at.asc())
    )
    return list(session.execute(stmt).scalars().all())


def _next_position(session: Session, user: User) -> int:
    current = session.execute(
        select(func.max(ShoppingListItem.position)).where(ShoppingListItem.user_id == user.id)
    ).scalar()
    return 0 if current is None else current + 1


def add_items(session: Session, user: User, items: Iterable[Mapping[str, Any]]) -> List[ShoppingListItem]:
    """
    Agrega ítems al final de la lista. Los ítems sin nombre se descartan.
    """
    position = _next_position(session, user)
    created: List[ShoppingListItem] = []
    for raw in items:
        name = str(raw.get("name") or "").strip()
        if not name:
            continue
        item = ShoppingListItem(
            user_id=user.id,
            name=name,
            quantity=str(raw.get("quantity") or "").strip(),
            unit=str(raw.get("unit") or "").strip(),
            recipe_id=raw.get("recipe_id"),
            recipe_title=raw.get("recipe_title"),
            position=position,
        )
        session.add(item)
        created.append(item)
        position += 1
    session.flush()
    return created


def add_item(session: Session, user: User, name: str, quantity: str = "", unit: str = "") -> ShoppingListItem:
    """
    Raises
    ------
    ValueError
        Si el nombre está vacío.
    """
    created = add_items(session, user, [{"name": name, "quantity": quantity, "unit": unit}])
    if not created:
        raise ValueError("El nombre del ítem es obligatorio")
    return created[0]


def add_from_recipe(
    session: Session,
    user: User,
    recipe_id: str,
    servings: Optional[float] = None,
    lang: Optional[str] = None,
) -> List[ShoppingListItem]:
    """
    Agrega todos los ingredientes de una receta, opcionalmente escalados a `servings`.
    """
    recipe = get_recipe_for_user(session, recipe_id, user)
    items: List[Dict[str, Any]] = []
    for group in recipe.ingredient_groups:
        for ing in group.ingredients:
            quantity = ing.quantity
            if servings:
                quantity = scale_quantity(quantity, recipe.servings_value, servings, lang)
            items.append(
                {
                    "name": ing.name,
                    "quantity": quantity,
                    "unit": ing.unit,
                    "recipe_id": recipe.id,
                    "recipe_title": recipe.title,
                }
            )
    created = add_items(session, user, items)
    logger.info(f"{len(created)} ingredientes de {recipe.id} agregados a la lista de {user.id}")
    return created


def _get_item(session: Session, user: User, item_id: str) -> ShoppingListItem:
    item = session.execute(
        select(ShoppingListItem).where(ShoppingListItem.id == item_id, ShoppingListItem.user_id == user.id)
    ).scalar_one_or_none()
    if item is None:
        raise NotFoundError(f"Ítem no encontrado: {item_id}")
    return item


def toggle_item(session: Session, user: User, item_id: str) -> ShoppingListItem:
    item = _get_item(session, user, item_id)
    item.is_checked = not item.is_checked
    session.flush()
    return item


def remove_item(session: Session, user: User, item_id: str) -> None:
    session.delete(_get_item(session, user, item_id))
    session.flush()


def clear_items(session: Session, user: User, checked_only: bool = False) -> int:
    """Borra la lista (o solo los ítems tildados). Devuelve cuántos se borraron."""
    stmt = delete(ShoppingListItem).where(ShoppingListItem.user_id == user.id)
    if checked_only:
        stmt = stmt.where(ShoppingListItem.is_checked.is_(True))
    result = session.execute(stmt)
    session.flush()
    return result.rowcount or 0
