"""
Builder para recetas extraídas por IA.

Arma el prompt de usuario a partir del material fuente (texto pegado,
página web descargada o texto de OCR) y parsea/valida el JSON del modelo
a un `ParsedRecipe`.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, List, Optional

from ...errors import AIServiceError
from .models import IngredientData, IngredientGroupData, ParsedRecipe
from .normalize import normalize_servings_unit, split_labels
from .prompts import get_recipe_parser_system_prompt

# "250 g mel" escrito entero en el nombre
_LEADING_QTY_RE = re.compile(r"^(\d+\s+\d+/\d+|\d+/\d+|\d+(?:[.,]\d+)?(?:\s*[-–]\s*\d+(?:[.,]\d+)?)?)\s+(.+)$")


@dataclass
class SourcePage:
    """
    Página web descargada para parsear.

    `text` es el contenido visible (sin scripts/estilos) y `og_image` la
    imagen principal declarada en los meta tags, si existe.
    """
    url: str
    text: str
    og_image: Optional[str] = None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _clean_ingredient(raw: dict) -> Optional[IngredientData]:
    name = _text(raw.get("name"))
    quantity = _text(raw.get("quantity"))
    unit = _text(raw.get("unit"))
    if not quantity:
        m = _LEADING_QTY_RE.match(name)
        if m:
            quantity, name = m.group(1).replace("–", "-"), m.group(2).strip()
    if not name:
        return None
    return IngredientData(name=name, quantity=quantity, unit=unit)


def _steps(value: Any) -> List[str]:
    out: List[str] = []
    for item in value or []:
        text = _text(item.get("text") if isinstance(item, dict) else item)
        if text:
            out.append(text)
    return out


class RecipeBuilder:
    """
    Builder de recetas parseadas por el LLM.

    Parameters
    ----------
    default_group_name:
        Nombre del grupo único cuando la fuente no nombra subsecciones
        ("Ingredienser", "Ingredientes", "Ingredients").
    """

    def __init__(self, default_group_name: str = "Ingredients"):
        self.default_group_name = default_group_name

    def get_system_prompt(self) -> str:
        return get_recipe_parser_system_prompt(self.default_group_name)

    def build_prompt(self, input_text: str, page: SourcePage | None = None) -> str:
        """
        Construye el prompt de usuario.

        Si hay `page`, el material es el texto de la página (la URL original
        queda como referencia) y se informa la og:image detectada.
        """
        parts: List[str] = []
        if page is not None:
            parts.append(f"=== SOURCE URL ===\n{page.url}\n")
            if page.og_image:
                parts.append(
                    "=== MAIN IMAGE (og:image) ===\n"
                    f"{page.og_image}\n"
                    "Use it as extracted_image_url.\n"
                )
            parts.append("=== PAGE CONTENT ===")
            parts.append(page.text)
        else:
            parts.append("=== RECIPE TEXT ===")
            parts.append(input_text)
            parts.append("\nThe source is not a web page: leave extracted_image_url empty.")
        return "\n".join(parts)

    def parse_document(self, json_str: str) -> ParsedRecipe:
        """
        Parsea y valida el JSON devuelto por el LLM.

        Raises
        ------
        AIServiceError
            JSON inválido, o falta título / grupos de ingredientes / instrucciones.
        """
        try:
            data = json.loads(json_str or "")
        except json.JSONDecodeError as e:
            raise AIServiceError("La IA devolvió un JSON inválido") from e
        if not isinstance(data, dict):
            raise AIServiceError("La IA devolvió un JSON inesperado")

        raw_groups = data.get("ingredient_groups", data.get("ingredientGroups"))
        title = _text(data.get("title"))
        instructions = _steps(data.get("instructions"))
        if not title or not raw_groups or not instructions:
            raise AIServiceError(
                "La respuesta de la IA no tiene los campos esenciales (título, ingredientes o instrucciones)"
            )

        groups: List[IngredientGroupData] = []
        for raw_group in raw_groups:
            if not isinstance(raw_group, dict):
                continue
            ingredients = [
                ing
                for ing in (_clean_ingredient(r) for r in raw_group.get("ingredients") or [] if isinstance(r, dict))
                if ing is not None
            ]
            name = _text(raw_group.get("name"))
            if not ingredients and not name:
                continue
            groups.append(IngredientGroupData(name=name, ingredients=ingredients))
        if not groups:
            raise AIServiceError("La respuesta de la IA no tiene ingredientes")

        servings_raw = data.get("servings_value", data.get("servingsValue"))
        try:
            servings = int(round(float(servings_raw))) if servings_raw not in (None, "") else 1
        except (TypeError, ValueError):
            servings = 1

        image = _text(data.get("extracted_image_url", data.get("extractedImageUrl"))) or None

        return ParsedRecipe(
            title=title,
            description=_text(data.get("description")),
            servings_value=servings if servings > 0 else 1,
            servings_unit=normalize_servings_unit(data.get("servings_unit", data.get("servingsUnit"))),
            prep_time=_text(data.get("prep_time", data.get("prepTime"))),
            cook_time=_text(data.get("cook_time", data.get("cookTime"))),
            ingredient_groups=groups,
            instructions=instructions,
            tips=_steps(data.get("tips")),
            tags=split_labels(data.get("tags")),
            categories=split_labels(data.get("categories")),
            extracted_image_url=image,
        )
