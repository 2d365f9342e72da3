"""
Persistencia de recetas: CRUD, permisos, valoraciones, links compartidos,
import/export.

Las funciones reciben una `Session` abierta y no hacen commit: la transacción
la maneja quien llama (`get_db()` en la API, `get_db_session()` en la CLI).
Así, el reemplazo de los arrays anidados en un update es atómico.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from ..config import get_settings
from ..domains.recipes.models import IngredientData, IngredientGroupData, RecipeData
from ..domains.recipes.normalize import normalize_recipe_payload, pick
from ..domains.recipes.reorder import reorder_recipe
from ..errors import NotFoundError, PermissionDeniedError
from ..security import generate_share_token
from .models import (
    Category,
    Ingredient,
    IngredientGroup,
    InstructionStep,
    Rating,
    Recipe,
    ShareToken,
    Tag,
    TipStep,
    User,
    utcnow,
)

logger = logging.getLogger(__name__)

_RECIPE_LOAD_OPTIONS = (
    selectinload(Recipe.ingredient_groups).selectinload(IngredientGroup.ingredients),
    selectinload(Recipe.instructions),
    selectinload(Recipe.tips),
    selectinload(Recipe.tags),
    selectinload(Recipe.categories),
    selectinload(Recipe.ratings),
)


# ============================================================
# Serialización
# ============================================================

def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def recipe_to_dict(
    recipe: Recipe,
    user_id: Optional[str] = None,
    include_share_tokens: bool = False,
) -> Dict[str, Any]:
    """
    Serializa una receta al formato de la API (que es también el de export/import).

    `my_rating` es la valoración del usuario `user_id` (None si no valoró).
    """
    my_rating = None
    if user_id:
        for rating in recipe.ratings:
            if rating.user_id == user_id:
                my_rating = rating.value
                break

    data: Dict[str, Any] = {
        "id": recipe.id,
        "title": recipe.title,
        "description": recipe.description or "",
        "servings_value": recipe.servings_value,
        "servings_unit": recipe.servings_unit,
        "prep_time": recipe.prep_time or "",
        "cook_time": recipe.cook_time or "",
        "image_url": recipe.image_url or "",
        "source_url": recipe.source_url or "",
        "is_public": recipe.is_public,
        "created_by": recipe.created_by,
        "created_at": _iso(recipe.created_at),
        "updated_at": _iso(recipe.updated_at),
        "average_rating": recipe.average_rating,
        "num_ratings": recipe.num_ratings,
        "my_rating": my_rating,
        "ingredient_groups": [
            {
                "id": group.id,
                "name": group.name,
                "ingredients": [
                    {"id": ing.id, "name": ing.name, "quantity": ing.quantity, "unit": ing.unit}
                    for ing in group.ingredients
                ],
            }
            for group in recipe.ingredient_groups
        ],
        "instructions": [{"id": step.id, "text": step.text} for step in recipe.instructions],
        "tips": [{"id": tip.id, "text": tip.text} for tip in recipe.tips],
        "tags": [tag.name for tag in recipe.tags],
        "categories": [cat.name for cat in recipe.categories],
    }
    if include_share_tokens:
        data["share_tokens"] = [share_token_to_dict(t) for t in recipe.share_tokens]
    return data


def share_token_to_dict(token: ShareToken) -> Dict[str, Any]:
    return {
        "token": token.token,
        "recipe_id": token.recipe_id,
        "shared_by": token.shared_by,
        "created_at": _iso(token.created_at),
        "expires_at": _iso(token.expires_at),
    }


def recipe_to_data(recipe: Recipe) -> RecipeData:
    """Receta ORM → `RecipeData` (para reordenar y re-aplicar)."""
    return RecipeData(
        title=recipe.title,
        description=recipe.description or "",
        servings_value=recipe.servings_value,
        servings_unit=recipe.servings_unit,
        prep_time=recipe.prep_time or "",
        cook_time=recipe.cook_time or "",
        image_url=recipe.image_url or "",
        source_url=recipe.source_url or "",
        is_public=recipe.is_public,
        ingredient_groups=[
            IngredientGroupData(
                name=group.name,
                ingredients=[IngredientData(i.name, i.quantity, i.unit) for i in group.ingredients],
            )
            for group in recipe.ingredient_groups
        ],
        instructions=[step.text for step in recipe.instructions],
        tips=[tip.text for tip in recipe.tips],
        tags=[tag.name for tag in recipe.tags],
        categories=[cat.name for cat in recipe.categories],
    )


# ============================================================
# Escritura
# ============================================================

def _get_or_create_labels(session: Session, model, names: Iterable[str]) -> list:
    """
    Busca tags/categorías sin distinguir mayúsculas; crea las que faltan.
    """
    out = []
    for name in names:
        existing = session.execute(
            select(model).where(func.lower(model.name) == name.lower())
        ).scalar_one_or_none()
        if existing is None:
            existing = model(name=name)
            session.add(existing)
            session.flush()
        if existing not in out:
            out.append(existing)
    return out


def apply_recipe_data(session: Session, recipe: Recipe, data: RecipeData) -> Recipe:
    """
    Copia `data` sobre la receta, reemplazando todos los arrays anidados.

    Los hijos previos se eliminan (delete-orphan) y se recrean con
    `position` según el orden recibido.
    """
    recipe.title = data.title
    recipe.description = data.description or None
    recipe.servings_value = data.servings_value
    recipe.servings_unit = data.servings_unit
    recipe.prep_time = data.prep_time or None
    recipe.cook_time = data.cook_time or None
    recipe.image_url = data.image_url or None
    recipe.source_url = data.source_url or None
    recipe.is_public = data.is_public

    recipe.ingredient_groups = [
        IngredientGroup(
            name=group.name,
            position=g_pos,
            ingredients=[
                Ingredient(name=ing.name, quantity=ing.quantity, unit=ing.unit, position=i_pos)
                for i_pos, ing in enumerate(group.ingredients)
            ],
        )
        for g_pos, group in enumerate(data.ingredient_groups)
    ]
    recipe.instructions = [InstructionStep(text=text, position=pos) for pos, text in enumerate(data.instructions)]
    recipe.tips = [TipStep(text=text, position=pos) for pos, text in enumerate(data.tips)]
    recipe.tags = _get_or_create_labels(session, Tag, data.tags)
    recipe.categories = _get_or_create_labels(session, Category, data.categories)
    return recipe


def create_recipe(session: Session, user: User, data: RecipeData) -> Recipe:
    recipe = Recipe(created_by=user.id)
    session.add(recipe)
    apply_recipe_data(session, recipe, data)
    session.flush()
    logger.info(f"Receta creada: {recipe.id} ({recipe.title!r}) por {user.id}")
    return recipe


def get_recipe(session: Session, recipe_id: str) -> Recipe:
    """
    Raises
    ------
    NotFoundError
        Si la receta no existe.
    """
    recipe = session.execute(
        select(Recipe).where(Recipe.id == recipe_id).options(*_RECIPE_LOAD_OPTIONS)
    ).scalar_one_or_none()
    if recipe is None:
        raise NotFoundError(f"Receta no encontrada: {recipe_id}")
    return recipe


def can_view(recipe: Recipe, user: Optional[User]) -> bool:
    if recipe.is_public:
        return True
    if user is None:
        return False
    return recipe.created_by == user.id or user.is_admin


def get_recipe_for_user(session: Session, recipe_id: str, user: Optional[User]) -> Recipe:
    """
    Devuelve la receta si el usuario puede verla (pública, propia o admin).

    Raises
    ------
    NotFoundError, PermissionDeniedError
    """
    recipe = get_recipe(session, recipe_id)
    if not can_view(recipe, user):
        raise PermissionDeniedError("No tenés acceso a esta receta")
    return recipe


def get_owned_recipe(session: Session, recipe_id: str, user: User) -> Recipe:
    recipe = get_recipe(session, recipe_id)
    if recipe.created_by != user.id:
        raise PermissionDeniedError("Solo el creador puede modificar esta receta")
    return recipe


def update_recipe(session: Session, recipe_id: str, user: User, data: RecipeData) -> Recipe:
    recipe = get_owned_recipe(session, recipe_id, user)
    apply_recipe_data(session, recipe, data)
    recipe.updated_at = utcnow()
    session.flush()
    return recipe


def delete_recipe(session: Session, recipe_id: str, user: User) -> None:
    recipe = get_recipe(session, recipe_id)
    if recipe.created_by != user.id and not user.is_admin:
        raise PermissionDeniedError("Solo el creador o un admin pueden borrar esta receta")
    session.delete(recipe)
    session.flush()
    logger.info(f"Receta borrada: {recipe_id} por {user.id}")


def reorder_recipe_items(
    session: Session,
    recipe_id: str,
    user: User,
    section: str,
    from_index: int,
    to_index: int,
    group_index: Optional[int] = None,
    to_group_index: Optional[int] = None,
) -> Recipe:
    recipe = get_owned_recipe(session, recipe_id, user)
    data = reorder_recipe(recipe_to_data(recipe), section, from_index, to_index, group_index, to_group_index)
    apply_recipe_data(session, recipe, data)
    recipe.updated_at = utcnow()
    session.flush()
    return recipe


# ============================================================
# Listado
# ============================================================

def list_recipes_for_user(session: Session, user: Optional[User]) -> List[Recipe]:
    """
    Recetas visibles para el usuario: públicas + propias.

    Sin usuario o con usuario no aprobado devuelve lista vacía.
    """
    if user is None or not user.is_approved:
        return []
    stmt = (
        select(Recipe)
        .where((Recipe.is_public.is_(True)) | (Recipe.created_by == user.id))
        .options(*_RECIPE_LOAD_OPTIONS)
        .order_by(Recipe.created_at.desc())
    )
    return list(session.execute(stmt).scalars().all())


def list_recipes_created_by(session: Session, user_id: str) -> List[Recipe]:
    stmt = (
        select(Recipe)
        .where(Recipe.created_by == user_id)
        .options(*_RECIPE_LOAD_OPTIONS, selectinload(Recipe.share_tokens))
        .order_by(Recipe.created_at.asc())
    )
    return list(session.execute(stmt).scalars().all())


# ============================================================
# Valoraciones
# ============================================================

def recompute_rating(session: Session, recipe: Recipe) -> Recipe:
    session.flush()
    count, avg = session.execute(
        select(func.count(Rating.id), func.avg(Rating.value)).where(Rating.recipe_id == recipe.id)
    ).one()
    recipe.num_ratings = int(count or 0)
    recipe.average_rating = float(avg) if count else 0.0
    return recipe


def rate_recipe(session: Session, recipe_id: str, user: User, value: int) -> Recipe:
    """
    Crea/actualiza la valoración del usuario. `value=0` la elimina.

    Raises
    ------
    ValueError
        Si `value` no es un entero 0..5.
    NotFoundError, PermissionDeniedError
        Si la receta no existe o el usuario no puede verla.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0 or value > 5:
        raise ValueError("La valoración debe ser un entero entre 0 y 5")

    recipe = get_recipe_for_user(session, recipe_id, user)
    existing = session.execute(
        select(Rating).where(Rating.recipe_id == recipe.id, Rating.user_id == user.id)
    ).scalar_one_or_none()

    if value == 0:
        if existing is not None:
            recipe.ratings.remove(existing)
    elif existing is not None:
        existing.value = value
    else:
        recipe.ratings.append(Rating(user_id=user.id, recipe_id=recipe.id, value=value))

    return recompute_rating(session, recipe)


# ============================================================
# Links compartidos
# ============================================================

def create_share_token(session: Session, recipe_id: str, user: User, ttl_hours: Optional[int] = None) -> ShareToken:
    recipe = get_owned_recipe(session, recipe_id, user)
    hours = ttl_hours if ttl_hours is not None else get_settings().share_token_ttl_hours
    token = ShareToken(
        token=generate_share_token(),
        expires_at=utcnow() + timedelta(hours=hours),
        shared_by=user.id,
        recipe_id=recipe.id,
    )
    session.add(token)
    session.flush()
    return token


def list_share_tokens(session: Session, recipe_id: str, user: User) -> List[ShareToken]:
    recipe = get_owned_recipe(session, recipe_id, user)
    stmt = select(ShareToken).where(ShareToken.recipe_id == recipe.id).order_by(ShareToken.created_at.desc())
    return list(session.execute(stmt).scalars().all())


def revoke_share_token(session: Session, recipe_id: str, user: User, token: str) -> None:
    recipe = get_owned_recipe(session, recipe_id, user)
    share = session.execute(
        select(ShareToken).where(ShareToken.recipe_id == recipe.id, ShareToken.token == token)
    ).scalar_one_or_none()
    if share is None:
        raise NotFoundError("Link compartido no encontrado")
    session.delete(share)
    session.flush()


def get_recipe_by_share_token(session: Session, token: str) -> Recipe:
    """
    Raises
    ------
    NotFoundError
        Si el token no existe o expiró.
    """
    share = session.execute(select(ShareToken).where(ShareToken.token == token)).scalar_one_or_none()
    if share is None or share.expires_at <= utcnow():
        raise NotFoundError("Link compartido inválido o expirado")
    return get_recipe(session, share.recipe_id)


# ============================================================
# Import
# ============================================================

def _from_epoch(ts: float) -> Optional[datetime]:
    # Epochs fuera de rango (p.ej. milisegundos de JS) se ignoran
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None)
    except (ValueError, OverflowError, OSError):
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Timestamp de un export: ISO 8601, epoch en segundos o `{seconds, nanoseconds}`.

    Devuelve un datetime UTC naive, o None si no se puede interpretar.
    """
    if value is None or value == "":
        return None
    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if seconds is None:
            return None
        try:
            ts = float(seconds) + float(nanos) / 1e9
        except (TypeError, ValueError):
            return None
        return _from_epoch(ts)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _from_epoch(float(value))
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _import_share_tokens(session: Session, recipe: Recipe, items: Any, user: User, seen: Set[str]) -> None:
    for item in items or []:
        if not isinstance(item, Mapping):
            continue
        token = str(item.get("token") or "").strip()
        expires_at = parse_timestamp(pick(item, "expires_at"))
        if not token or expires_at is None:
            continue
        if token in seen or session.execute(select(ShareToken.id).where(ShareToken.token == token)).first():
            logger.info(f"Token compartido ya existente, se omite: {token[:8]}...")
            continue
        session.add(
            ShareToken(
                token=token,
                expires_at=expires_at,
                created_at=parse_timestamp(pick(item, "created_at")) or utcnow(),
                shared_by=str(pick(item, "shared_by") or user.id),
                recipe_id=recipe.id,
            )
        )
        seen.add(token)


def import_recipes(session: Session, user: User, items: Any) -> Tuple[int, int]:
    """
    Importa recetas exportadas (formato JSON de export, camelCase o snake_case).

    - Se omiten títulos que el usuario ya tiene (y entradas inválidas).
    - El creador siempre es `user`; se ignoran id, ratings y created_by.
    - Se conservan created_at/updated_at si vienen.

    Returns
    -------
    (count, skipped_count)

    Raises
    ------
    ValueError
        Si `items` no es una lista.
    """
    if not isinstance(items, list):
        raise ValueError("Formato inválido: se esperaba un array de recetas")

    existing_titles = {
        title.lower()
        for (title,) in session.execute(select(Recipe.title).where(Recipe.created_by == user.id)).all()
    }

    seen_tokens: Set[str] = set()
    count = 0
    skipped = 0
    for raw in items:
        if not isinstance(raw, Mapping):
            skipped += 1
            continue
        try:
            data = normalize_recipe_payload(raw)
        except ValueError as e:
            logger.info(f"Receta inválida en import, se omite: {e}")
            skipped += 1
            continue
        if data.title.lower() in existing_titles:
            logger.info(f"Receta duplicada en import, se omite: {data.title!r}")
            skipped += 1
            continue

        recipe = create_recipe(session, user, data)
        created_at = parse_timestamp(pick(raw, "created_at"))
        updated_at = parse_timestamp(pick(raw, "updated_at"))
        if created_at:
            recipe.created_at = created_at
        if updated_at:
            recipe.updated_at = updated_at
        _import_share_tokens(session, recipe, pick(raw, "share_tokens"), user, seen_tokens)
        session.flush()

        existing_titles.add(data.title.lower())
        count += 1

    logger.info(f"Import de {user.id}: {count} recetas, {skipped} omitidas")
    return count, skipped
