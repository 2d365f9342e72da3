"""
recipe_ai_core.export.pdf_weasyprint
====================================

Exportador HTML → PDF de recetas usando WeasyPrint.

El HTML lo genera `RecipeRenderer` (una receta o una colección); acá solo
se agrega la hoja de estilos de impresión y se escribe el PDF.

Requisitos
----------
- weasyprint instalado en el entorno: `pip install weasyprint`
- Las imágenes remotas (image_url) se descargan al renderizar; si no hay
  red, WeasyPrint las omite.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# CSS de impresión; se suma al CSS embebido del HTML
_PRINT_CSS = """
@page {
    size: A4;
    margin: 2cm;
    @bottom-center { content: counter(page); font-size: 9pt; color: #888; }
}

body {
    font-family: 'Helvetica Neue', Arial, sans-serif;
    font-size: 11pt;
    line-height: 1.5;
    color: #1a1a1a;
    max-width: none;
    padding: 0;
}

h1 { font-size: 20pt; margin: 0 0 0.4em; border-bottom: 1px solid #ddd; padding-bottom: 0.2em; }
h2 { font-size: 14pt; margin: 1em 0 0.3em; }
h3 { font-size: 12pt; margin: 0.8em 0 0.2em; }
h1, h2, h3 { page-break-after: avoid; }

ul, ol { margin: 0.3em 0; padding-left: 1.5em; }
li { margin: 0.15em 0; }

.ingredient-group { page-break-inside: avoid; }
article.recipe { page-break-after: always; }
article.recipe:last-child { page-break-after: auto; }
"""


@dataclass
class PdfWeasyprintExporter:
    """
    Exportador PDF basado en WeasyPrint (HTML → PDF nativo).

    Atributos
    ---------
    name:
        Identificador del exportador.
    base_url:
        URL base para resolver recursos relativos (imágenes, etc.).
    """

    name: str = "pdf_weasyprint"
    base_url: str | None = None

    def export_from_html_string(
        self,
        html_content: str,
        output_path: Path,
    ) -> Path:
        """
        Genera un PDF desde un documento HTML completo.

        Raises
        ------
        RuntimeError
            Si WeasyPrint falla al generar el PDF.
        """
        from weasyprint import CSS, HTML

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            doc = HTML(string=html_content, base_url=self.base_url)
            doc.write_pdf(str(output_path), stylesheets=[CSS(string=_PRINT_CSS)])
        except Exception as e:
            raise RuntimeError(f"WeasyPrint falló al generar el PDF: {e}") from e

        return output_path
