"""
Etiquetas localizadas para los exports de recetas (Markdown / HTML / PDF).

Cada idioma define los títulos de sección y los rótulos de metadatos. Un
código desconocido cae en inglés.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class ExportLabels:
    """
    Textos que usa el renderer.

    Attributes
    ----------
    lang:
        Código de idioma ("en", "es", "no").
    ingredients, instructions, tips:
        Títulos de sección.
    servings, pieces:
        Rótulo de porciones según `servings_unit`.
    prep_time, cook_time, source:
        Rótulos de metadatos.
    collection_title:
        Título del documento HTML cuando se exportan varias recetas.
    """

    lang: str
    ingredients: str
    instructions: str
    tips: str
    servings: str
    pieces: str
    prep_time: str
    cook_time: str
    source: str
    collection_title: str


EN = ExportLabels(
    lang="en",
    ingredients="Ingredients",
    instructions="Instructions",
    tips="Tips",
    servings="Servings",
    pieces="Pieces",
    prep_time="Prep time",
    cook_time="Cook time",
    source="Source",
    collection_title="My recipes",
)

ES = ExportLabels(
    lang="es",
    ingredients="Ingredientes",
    instructions="Instrucciones",
    tips="Consejos",
    servings="Porciones",
    pieces="Unidades",
    prep_time="Tiempo de preparación",
    cook_time="Tiempo de cocción",
    source="Fuente",
    collection_title="Mis recetas",
)

NO = ExportLabels(
    lang="no",
    ingredients="Ingredienser",
    instructions="Fremgangsmåte",
    tips="Tips",
    servings="Porsjoner",
    pieces="Stykker",
    prep_time="Forberedelsestid",
    cook_time="Steketid",
    source="Kilde",
    collection_title="Mine oppskrifter",
)

LABELS: Dict[str, ExportLabels] = {
    "en": EN,
    "es": ES,
    "no": NO,
    "nb": NO,
    "nn": NO,
}

# Nombre del grupo por defecto cuando la IA no detecta subsecciones
DEFAULT_GROUP_NAMES: Dict[str, str] = {
    "no": "Ingredienser",
    "es": "Ingredientes",
}


def get_labels(lang: str | None) -> ExportLabels:
    code = (lang or "en").strip().lower().split("-")[0].split("_")[0]
    return LABELS.get(code, EN)


def default_group_name(lang: str | None) -> str:
    code = (lang or "").strip().lower().split("-")[0].split("_")[0]
    if code in ("nb", "nn"):
        code = "no"
    return DEFAULT_GROUP_NAMES.get(code, "Ingredients")
