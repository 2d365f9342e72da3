"""
Normalización de payloads de recetas (formularios, import, IA).

Acepta claves snake_case y camelCase (formato de export histórico) y
devuelve un `RecipeData` limpio:
- títulos y textos recortados,
- ingredientes sin nombre descartados,
- grupos vacíos y sin nombre descartados,
- pasos/tips en blanco descartados,
- tags/categorías sin duplicados (case-insensitive, gana la primera grafía).
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from .models import SERVINGS_UNITS, IngredientData, IngredientGroupData, RecipeData

# snake_case -> alias camelCase aceptados
_ALIASES: Dict[str, tuple[str, ...]] = {
    "servings_value": ("servingsValue",),
    "servings_unit": ("servingsUnit",),
    "prep_time": ("prepTime",),
    "cook_time": ("cookTime",),
    "image_url": ("imageUrl",),
    "source_url": ("sourceUrl",),
    "is_public": ("isPublic",),
    "ingredient_groups": ("ingredientGroups",),
    "created_at": ("createdAt",),
    "updated_at": ("updatedAt",),
    "share_tokens": ("shareTokens",),
    "expires_at": ("expiresAt",),
    "shared_by": ("sharedBy",),
}


def pick(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Lee `key` o cualquiera de sus alias camelCase."""
    if key in data:
        return data[key]
    for alias in _ALIASES.get(key, ()):
        if alias in data:
            return data[alias]
    return default


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def split_labels(value: Any) -> List[str]:
    """
    Normaliza tags o categorías.

    Acepta lista o string separado por comas. Los elementos pueden ser
    strings o dicts con `name` (formato de export).
    """
    if value is None:
        return []
    if isinstance(value, str):
        raw: Iterable[Any] = value.split(",")
    else:
        raw = value

    out: List[str] = []
    seen: set[str] = set()
    for item in raw:
        if isinstance(item, Mapping):
            item = item.get("name")
        label = _text(item)
        if not label or label.lower() in seen:
            continue
        seen.add(label.lower())
        out.append(label)
    return out


def _step_texts(value: Any) -> List[str]:
    steps: List[str] = []
    for item in value or []:
        if isinstance(item, Mapping):
            item = item.get("text")
        text = _text(item)
        if text:
            steps.append(text)
    return steps


def normalize_groups(value: Any) -> List[IngredientGroupData]:
    groups: List[IngredientGroupData] = []
    for raw_group in value or []:
        if not isinstance(raw_group, Mapping):
            continue
        ingredients: List[IngredientData] = []
        for raw_ing in raw_group.get("ingredients") or []:
            if not isinstance(raw_ing, Mapping):
                continue
            name = _text(raw_ing.get("name"))
            if not name:
                continue
            ingredients.append(
                IngredientData(
                    name=name,
                    quantity=_text(raw_ing.get("quantity")),
                    unit=_text(raw_ing.get("unit")),
                )
            )
        name = _text(raw_group.get("name"))
        if not name and not ingredients:
            continue
        groups.append(IngredientGroupData(name=name, ingredients=ingredients))
    return groups


def parse_servings_value(value: Any, default: int = 1) -> int:
    """
    Porciones como entero positivo.

    Raises
    ------
    ValueError
        Si el valor no es numérico o no es > 0.
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValueError("servings_value inválido")
    try:
        number = float(str(value).strip().replace(",", "."))
    except ValueError as e:
        raise ValueError(f"servings_value inválido: {value!r}") from e
    servings = int(round(number))
    if servings <= 0:
        raise ValueError("servings_value debe ser mayor a 0")
    return servings


def normalize_servings_unit(value: Any) -> str:
    unit = _text(value).lower()
    return unit if unit in SERVINGS_UNITS else "servings"


def normalize_recipe_payload(data: Mapping[str, Any]) -> RecipeData:
    """
    Convierte un payload crudo en `RecipeData`.

    Los campos de solo-cliente (`isChecked`, `fieldId`) y los inmutables
    (`id`, `created_by`, ratings, timestamps) se ignoran.

    Raises
    ------
    ValueError
        Si falta el título o las porciones son inválidas.
    """
    title = _text(data.get("title"))
    if not title:
        raise ValueError("El título es obligatorio")

    return RecipeData(
        title=title,
        description=_text(data.get("description")),
        servings_value=parse_servings_value(pick(data, "servings_value")),
        servings_unit=normalize_servings_unit(pick(data, "servings_unit")),
        prep_time=_text(pick(data, "prep_time")),
        cook_time=_text(pick(data, "cook_time")),
        image_url=_text(pick(data, "image_url")),
        source_url=_text(pick(data, "source_url")),
        is_public=bool(pick(data, "is_public", False)),
        ingredient_groups=normalize_groups(pick(data, "ingredient_groups")),
        instructions=_step_texts(data.get("instructions")),
        tips=_step_texts(data.get("tips")),
        tags=split_labels(data.get("tags")),
        categories=split_labels(data.get("categories")),
    )
