"""
Modelos de dominio específicos para recetas.

Son estructuras planas (sin ORM) que viajan entre la normalización de
formularios, el parser de la IA, el escalado de porciones y la persistencia.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

SERVINGS_UNITS = ("servings", "pieces")


@dataclass
class IngredientData:
    """
    Ingrediente. `quantity` y `unit` son texto libre ("250", "1 1/4", "g").
    """
    name: str
    quantity: str = ""
    unit: str = ""


@dataclass
class IngredientGroupData:
    """
    Grupo de ingredientes. `name` puede ser vacío (grupo sin título).
    """
    name: str = ""
    ingredients: List[IngredientData] = field(default_factory=list)


@dataclass
class RecipeData:
    """
    Receta normalizada, lista para persistir.
    """
    title: str
    description: str = ""
    servings_value: int = 1
    servings_unit: str = "servings"
    prep_time: str = ""
    cook_time: str = ""
    image_url: str = ""
    source_url: str = ""
    is_public: bool = False
    ingredient_groups: List[IngredientGroupData] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ParsedRecipe(RecipeData):
    """
    Receta extraída por la IA (texto, URL u OCR).

    `extracted_image_url` es la imagen encontrada en la página de origen
    (og:image), si la hubo; el frontend decide si la usa como `image_url`.
    """
    extracted_image_url: Optional[str] = None
