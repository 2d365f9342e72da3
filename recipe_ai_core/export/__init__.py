from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List
from uuid import uuid4

from ..config import get_settings
from ..domains.recipes.renderer import RecipeRenderer
from .pdf_weasyprint import PdfWeasyprintExporter

EXPORT_FORMATS = ("json", "markdown", "html", "pdf")

_MEDIA_TYPES = {
    "json": ("application/json", "json"),
    "markdown": ("text/markdown; charset=utf-8", "md"),
    "html": ("text/html; charset=utf-8", "html"),
    "pdf": ("application/pdf", "pdf"),
}

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\r\n]+')


@dataclass
class ExportResult:
    content: bytes
    media_type: str
    filename: str


def safe_filename(title: str, ext: str) -> str:
    stem = _UNSAFE_FILENAME_RE.sub("_", (title or "").strip()).strip(" .") or "recipe"
    return f"{stem}.{ext}"


def export_pdf(html_content: str, pdf_name: str = "recipes.pdf", output_dir: Path | None = None) -> Path:
    """
    Escribe el PDF bajo `EXPORT_DIR` (o `output_dir`) y devuelve la ruta.
    """
    base = Path(output_dir or get_settings().export_dir)
    return PdfWeasyprintExporter().export_from_html_string(html_content, base / pdf_name)


def export_recipes(
    recipes: List[Dict[str, Any]],
    fmt: str = "json",
    lang: str | None = "en",
    single: bool = False,
) -> ExportResult:
    """
    Exporta una receta (`single=True`, lista de un elemento) o una colección.

    Raises
    ------
    ValueError
        Formato desconocido.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Formato de export inválido: {fmt}")
    media_type, ext = _MEDIA_TYPES[fmt]
    filename = safe_filename(recipes[0]["title"], ext) if single and recipes else f"recipes.{ext}"

    if fmt == "json":
        payload: Any = recipes[0] if single and recipes else recipes
        content = json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")
        return ExportResult(content, media_type, filename)

    if fmt == "markdown":
        renderer = RecipeRenderer(lang)
        text = renderer.render_markdown(recipes[0]) if single and recipes else renderer.render_markdown_collection(recipes)
        return ExportResult(text.encode("utf-8"), media_type, filename)

    if fmt == "html":
        renderer = RecipeRenderer(lang)
        text = renderer.render_html(recipes[0]) if single and recipes else renderer.render_html_collection(recipes)
        return ExportResult(text.encode("utf-8"), media_type, filename)

    renderer = RecipeRenderer(lang, include_meta=True)
    html = renderer.render_html(recipes[0]) if single and recipes else renderer.render_html_collection(recipes)
    # Nombre único por export; el archivo se borra después de leerlo
    pdf_path = export_pdf(html, pdf_name=f"{uuid4().hex}_{filename}")
    try:
        content = pdf_path.read_bytes()
    finally:
        pdf_path.unlink(missing_ok=True)
    return ExportResult(content, media_type, filename)
