"""
Reordenamiento (drag-and-drop) de los arrays anidados de una receta.

Semántica de `Array.splice`: se saca el elemento en `from_index` y se
inserta en `to_index` (recortado al rango válido).
"""

from __future__ import annotations

from typing import List, Optional, TypeVar

from .models import RecipeData

T = TypeVar("T")

SECTIONS = ("ingredient_groups", "ingredients", "instructions", "tips")


def move_item(items: List[T], from_index: int, to_index: int) -> List[T]:
    """
    Mueve un elemento dentro de la lista (in-place) y la devuelve.

    Raises
    ------
    IndexError
        Si `from_index` está fuera de rango.
    """
    if from_index < 0 or from_index >= len(items):
        raise IndexError(f"Índice de origen fuera de rango: {from_index}")
    item = items.pop(from_index)
    to_index = max(0, min(to_index, len(items)))
    items.insert(to_index, item)
    return items


def reorder_recipe(
    recipe: RecipeData,
    section: str,
    from_index: int,
    to_index: int,
    group_index: Optional[int] = None,
    to_group_index: Optional[int] = None,
) -> RecipeData:
    """
    Aplica un movimiento sobre una sección de la receta.

    Para `ingredients`, `group_index` indica el grupo de origen y
    `to_group_index` (opcional) el de destino; si difieren, el ingrediente
    cambia de grupo.

    Raises
    ------
    ValueError
        Sección desconocida o índices inválidos.
    """
    if section not in SECTIONS:
        raise ValueError(f"Sección inválida: {section}")

    try:
        if section == "ingredient_groups":
            move_item(recipe.ingredient_groups, from_index, to_index)
        elif section == "instructions":
            move_item(recipe.instructions, from_index, to_index)
        elif section == "tips":
            move_item(recipe.tips, from_index, to_index)
        else:
            groups = recipe.ingredient_groups
            src = 0 if group_index is None else group_index
            dst = src if to_group_index is None else to_group_index
            if not (0 <= src < len(groups)) or not (0 <= dst < len(groups)):
                raise IndexError("Grupo fuera de rango")
            if src == dst:
                move_item(groups[src].ingredients, from_index, to_index)
            else:
                source = groups[src].ingredients
                if from_index < 0 or from_index >= len(source):
                    raise IndexError(f"Índice de origen fuera de rango: {from_index}")
                item = source.pop(from_index)
                target = groups[dst].ingredients
                target.insert(max(0, min(to_index, len(target))), item)
    except IndexError as e:
        raise ValueError(str(e)) from e

    return recipe
