"""
Filtro de recetas por visibilidad, categoría/tag y término de búsqueda.

Trabaja sobre recetas serializadas (dicts como los que devuelve
`recipe_to_dict`), así puede aplicarse tanto en la API como en tests sin DB.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

VISIBILITY_OPTIONS = ("all-viewable", "my-all", "my-public", "my-private", "community-public")


def _names(items: Iterable[Any]) -> List[str]:
    out: List[str] = []
    for item in items or []:
        if isinstance(item, dict):
            item = item.get("name")
        if item:
            out.append(str(item))
    return out


def _ingredient_names(recipe: Dict[str, Any]) -> List[str]:
    names: List[str] = []
    for group in recipe.get("ingredient_groups") or []:
        names.extend(_names(group.get("ingredients") or []))
    return names


def _visible(recipe: Dict[str, Any], user_id: Optional[str], visibility: str) -> bool:
    is_public = bool(recipe.get("is_public"))
    is_own = user_id is not None and recipe.get("created_by") == user_id

    if visibility == "my-all":
        return is_own
    if visibility == "my-public":
        return is_own and is_public
    if visibility == "my-private":
        return is_own and not is_public
    if visibility == "community-public":
        return is_public and not is_own
    # all-viewable: la lista ya viene filtrada por permisos
    return True if user_id else is_public


def _matches_term(recipe: Dict[str, Any], term: str) -> bool:
    haystack = [
        recipe.get("title") or "",
        recipe.get("description") or "",
        *_names(recipe.get("categories") or []),
        *_names(recipe.get("tags") or []),
        *_ingredient_names(recipe),
    ]
    return any(term in str(value).lower() for value in haystack)


def filter_recipes(
    recipes: Iterable[Dict[str, Any]],
    user_id: Optional[str],
    visibility: str = "all-viewable",
    category: Optional[str] = None,
    tag: Optional[str] = None,
    term: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Aplica los filtros de la pantalla de listado.

    Parameters
    ----------
    visibility:
        Uno de `VISIBILITY_OPTIONS`. Sin usuario, `my-*` devuelve vacío.
    category, tag:
        Coincidencia exacta sin distinguir mayúsculas. Si viene `category`,
        `tag` se ignora.
    term:
        Substring (case-insensitive) sobre título, descripción, categorías,
        tags y nombres de ingredientes de todos los grupos.

    Raises
    ------
    ValueError
        Si `visibility` no es una opción conocida.
    """
    if visibility not in VISIBILITY_OPTIONS:
        raise ValueError(f"visibility inválida: {visibility}")

    category_l = (category or "").strip().lower()
    tag_l = (tag or "").strip().lower()
    term_l = (term or "").strip().lower()

    out: List[Dict[str, Any]] = []
    for recipe in recipes:
        if not _visible(recipe, user_id, visibility):
            continue
        if category_l:
            if category_l not in (c.lower() for c in _names(recipe.get("categories") or [])):
                continue
        elif tag_l:
            if tag_l not in (t.lower() for t in _names(recipe.get("tags") or [])):
                continue
        if term_l and not _matches_term(recipe, term_l):
            continue
        out.append(recipe)
    return out


def collect_labels(recipes: Iterable[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Tags y categorías distintas (ordenadas, sin distinguir mayúsculas).
    """
    tags: Dict[str, str] = {}
    categories: Dict[str, str] = {}
    for recipe in recipes:
        for name in _names(recipe.get("tags") or []):
            tags.setdefault(name.lower(), name)
        for name in _names(recipe.get("categories") or []):
            categories.setdefault(name.lower(), name)
    return {
        "tags": sorted(tags.values(), key=str.lower),
        "categories": sorted(categories.values(), key=str.lower),
    }
