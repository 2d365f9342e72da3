"""
Renderer para exports de recetas.

Convierte recetas serializadas (dicts de `recipe_to_dict`) a Markdown y HTML.
El HTML escapa todo el contenido del usuario.
"""

from __future__ import annotations

from html import escape
from typing import Any, Dict, Iterable, List

from .labels import ExportLabels, get_labels

_HTML_CSS = """
body { font-family: sans-serif; line-height: 1.6; color: #333; max-width: 800px; margin: 0 auto; padding: 20px; }
h1, h2, h3 { color: #2c3e50; margin-top: 1.5em; margin-bottom: 0.5em; }
h1 { font-size: 2.2em; }
h2 { font-size: 1.6em; border-bottom: 1px solid #eee; padding-bottom: 5px; }
h3 { font-size: 1.2em; }
ul, ol { margin-bottom: 1em; padding-left: 25px; }
li { margin-bottom: 0.4em; }
.meta { color: #666; font-size: 0.95em; }
.section { margin-bottom: 2em; }
.ingredient-group { margin-bottom: 1.5em; }
article.recipe { page-break-after: always; }
"""


def _ingredient_line(ingredient: Dict[str, Any]) -> str:
    parts = [
        str(ingredient.get("quantity") or "").strip(),
        str(ingredient.get("unit") or "").strip(),
        str(ingredient.get("name") or "").strip(),
    ]
    return " ".join(p for p in parts if p)


def _step_texts(items: Iterable[Any]) -> List[str]:
    out: List[str] = []
    for item in items or []:
        text = item.get("text") if isinstance(item, dict) else item
        if text:
            out.append(str(text))
    return out


def _meta_pairs(recipe: Dict[str, Any], labels: ExportLabels) -> List[tuple[str, str]]:
    pairs: List[tuple[str, str]] = []
    servings = recipe.get("servings_value")
    if servings:
        label = labels.pieces if recipe.get("servings_unit") == "pieces" else labels.servings
        pairs.append((label, str(servings)))
    if recipe.get("prep_time"):
        pairs.append((labels.prep_time, str(recipe["prep_time"])))
    if recipe.get("cook_time"):
        pairs.append((labels.cook_time, str(recipe["cook_time"])))
    return pairs


class RecipeRenderer:
    """
    Renderer de recetas a Markdown / HTML.

    Parameters
    ----------
    lang:
        Idioma de los títulos de sección ("en", "es", "no"; fallback inglés).
    include_meta:
        Si True agrega porciones/tiempos/fuente. El export clásico no los
        incluye; el PDF sí.
    """

    def __init__(self, lang: str | None = "en", include_meta: bool = False):
        self.labels = get_labels(lang)
        self.include_meta = include_meta

    # ---------- Markdown ----------

    def render_markdown(self, recipe: Dict[str, Any]) -> str:
        labels = self.labels
        lines: List[str] = []
        lines.append(f"# {recipe.get('title', '')}\n\n")

        description = (recipe.get("description") or "").strip()
        if description:
            lines.append(f"{description}\n\n")

        if self.include_meta:
            pairs = _meta_pairs(recipe, labels)
            for label, value in pairs:
                lines.append(f"- **{label}**: {value}\n")
            if pairs:
                lines.append("\n")

        lines.append(f"## {labels.ingredients}\n\n")
        for group in recipe.get("ingredient_groups") or []:
            if group.get("name"):
                lines.append(f"### {group['name']}\n")
            for ingredient in group.get("ingredients") or []:
                lines.append(f"- {_ingredient_line(ingredient)}\n")

        lines.append(f"\n## {labels.instructions}\n\n")
        for i, text in enumerate(_step_texts(recipe.get("instructions")), start=1):
            lines.append(f"{i}. {text}\n")

        tips = _step_texts(recipe.get("tips"))
        if tips:
            lines.append(f"\n## {labels.tips}\n\n")
            for text in tips:
                lines.append(f"- {text}\n")

        if self.include_meta and recipe.get("source_url"):
            lines.append(f"\n{labels.source}: {recipe['source_url']}\n")

        return "".join(lines)

    def render_markdown_collection(self, recipes: Iterable[Dict[str, Any]]) -> str:
        """Recetas separadas por una regla horizontal (`---`)."""
        return "\n---\n\n".join(self.render_markdown(r) for r in recipes)

    # ---------- HTML ----------

    def render_html_fragment(self, recipe: Dict[str, Any]) -> str:
        labels = self.labels
        parts: List[str] = ['<article class="recipe">']
        parts.append(f"<h1>{escape(str(recipe.get('title', '')))}</h1>")

        description = (recipe.get("description") or "").strip()
        if description:
            parts.append(f"<p>{escape(description)}</p>")

        if self.include_meta:
            pairs = _meta_pairs(recipe, labels)
            if pairs:
                meta = " · ".join(f"{escape(k)}: {escape(v)}" for k, v in pairs)
                parts.append(f'<p class="meta">{meta}</p>')

        parts.append(f'<div class="section"><h2>{escape(labels.ingredients)}</h2>')
        for group in recipe.get("ingredient_groups") or []:
            parts.append('<div class="ingredient-group">')
            if group.get("name"):
                parts.append(f"<h3>{escape(str(group['name']))}</h3>")
            parts.append("<ul>")
            for ingredient in group.get("ingredients") or []:
                parts.append(f"<li>{escape(_ingredient_line(ingredient))}</li>")
            parts.append("</ul></div>")
        parts.append("</div>")

        parts.append(f'<div class="section"><h2>{escape(labels.instructions)}</h2><ol>')
        for text in _step_texts(recipe.get("instructions")):
            parts.append(f"<li>{escape(text)}</li>")
        parts.append("</ol></div>")

        tips = _step_texts(recipe.get("tips"))
        if tips:
            parts.append(f'<div class="section"><h2>{escape(labels.tips)}</h2><ul>')
            for text in tips:
                parts.append(f"<li>{escape(text)}</li>")
            parts.append("</ul></div>")

        if self.include_meta and recipe.get("source_url"):
            src = escape(str(recipe["source_url"]))
            parts.append(f'<p class="meta">{escape(labels.source)}: <a href="{src}">{src}</a></p>')

        parts.append("</article>")
        return "\n".join(parts)

    def _document(self, title: str, body: str) -> str:
        return (
            "<!DOCTYPE html>\n"
            f'<html lang="{self.labels.lang}">\n'
            "<head>\n"
            '<meta charset="utf-8">\n'
            f"<title>{escape(title)}</title>\n"
            f"<style>{_HTML_CSS}</style>\n"
            "</head>\n"
            "<body>\n"
            f"{body}\n"
            "</body>\n"
            "</html>\n"
        )

    def render_html(self, recipe: Dict[str, Any]) -> str:
        return self._document(str(recipe.get("title", "")), self.render_html_fragment(recipe))

    def render_html_collection(self, recipes: Iterable[Dict[str, Any]]) -> str:
        body = "\n".join(self.render_html_fragment(r) for r in recipes)
        return self._document(self.labels.collection_title, body)
