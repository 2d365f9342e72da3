"""
recipe_ai_core.llm_client
=========================

Llamadas a OpenAI para importar recetas.

- `parse_recipe_from_text()`: texto libre o URL (se baja la página con
  httpx y se extrae el texto y el og:image con BeautifulSoup).
- `ocr_and_parse_recipe_from_image()`: OCR con el modelo de visión y
  luego el mismo parseo que el texto.
- `suggest_recipe_image()`: genera una imagen y la devuelve como data URI.

Los errores del SDK o de la red se traducen a `AIServiceError`; la entrada
inválida es `ValueError`.
"""

from __future__ import annotations

import base64
import logging
import re
from typing import List

import httpx
from bs4 import BeautifulSoup
from openai import OpenAI, OpenAIError

from .config import get_settings
from .domains.recipes.builder import RecipeBuilder, SourcePage
from .domains.recipes.labels import default_group_name
from .domains.recipes.models import ParsedRecipe
from .domains.recipes.prompts import OCR_SYSTEM, get_image_prompt
from .errors import AIServiceError

logger = logging.getLogger(__name__)

MIN_INPUT_LENGTH = 10
MAX_PAGE_TEXT = 20000
LARGE_IMAGE_URI_LENGTH = 700_000

_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)
_DATA_URI_RE = re.compile(r"^data:(image/[\w.+-]+);base64,", re.IGNORECASE)


def get_client() -> OpenAI:
    settings = get_settings()
    if not settings.openai_api_key:
        raise AIServiceError("OPENAI_API_KEY no está configurada en el .env")
    return OpenAI(api_key=settings.openai_api_key)


def is_url(text: str) -> bool:
    return bool(_URL_RE.match((text or "").strip()))


def image_bytes_to_data_uri(data: bytes, mime: str | None) -> str:
    """
    Convierte un upload crudo a data URI.

    Raises
    ------
    ValueError
        Si el archivo está vacío o el MIME no es de imagen.
    """
    if not data:
        raise ValueError("El archivo de imagen está vacío")
    mime = (mime or "").lower() or "image/png"
    if not mime.startswith("image/"):
        raise ValueError(f"Tipo de archivo no soportado: {mime}")
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def fetch_recipe_page(url: str, timeout: float = 20.0) -> SourcePage:
    """
    Descarga una página de receta y extrae su texto visible y la og:image.

    Raises
    ------
    AIServiceError
        Si la página no se puede descargar.
    """
    headers = {"User-Agent": "Mozilla/5.0 (compatible; recipe-ai-core/0.1)"}
    try:
        with httpx.Client(timeout=httpx.Timeout(timeout, connect=5.0), follow_redirects=True, headers=headers) as client:
            resp = client.get(url)
            resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"No se pudo descargar {url}: {e}")
        raise AIServiceError(f"No se pudo descargar la página: {url}") from e

    soup = BeautifulSoup(resp.text, "html.parser")

    og_image = None
    meta = soup.find("meta", attrs={"property": "og:image"}) or soup.find("meta", attrs={"name": "og:image"})
    if meta and meta.get("content"):
        og_image = str(meta["content"]).strip() or None

    for tag in soup(["script", "style", "nav", "header", "footer", "noscript"]):
        tag.decompose()
    text = soup.get_text(separator="\n", strip=True)
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    text = "\n".join(lines)
    if len(text) > MAX_PAGE_TEXT:
        text = text[:MAX_PAGE_TEXT] + "..."

    logger.info(f"Página descargada: {url} ({len(text)} caracteres, og:image={'sí' if og_image else 'no'})")
    return SourcePage(url=url, text=text, og_image=og_image)


def _complete_recipe_json(builder: RecipeBuilder, user_prompt: str) -> str:
    settings = get_settings()
    client = get_client()
    try:
        completion = client.chat.completions.create(
            model=settings.openai_model_text,
            messages=[
                {"role": "system", "content": builder.get_system_prompt()},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
            temperature=0.1,
        )
    except OpenAIError as e:
        logger.exception("Error llamando a OpenAI para parsear la receta")
        raise AIServiceError("El servicio de IA no respondió") from e

    return completion.choices[0].message.content or "{}"


def parse_recipe_from_text(input_text: str, user_language_code: str | None = None) -> ParsedRecipe:
    """
    Parsea una receta desde texto libre o desde una URL.

    Parameters
    ----------
    input_text:
        Texto de la receta, o una URL http(s) a una página de receta.
    user_language_code:
        Idioma de la UI; define el nombre del grupo por defecto.

    Raises
    ------
    ValueError
        Si el texto tiene menos de 10 caracteres.
    AIServiceError
        Si la IA falla o su respuesta no es una receta válida.
    """
    text = (input_text or "").strip()
    if len(text) < MIN_INPUT_LENGTH:
        raise ValueError("El texto es demasiado corto para ser una receta o URL")

    builder = RecipeBuilder(default_group_name=default_group_name(user_language_code))
    page = fetch_recipe_page(text) if is_url(text) else None

    raw = _complete_recipe_json(builder, builder.build_prompt(text, page=page))
    recipe = builder.parse_document(raw)

    if page is not None:
        recipe.source_url = page.url
        recipe.extracted_image_url = recipe.extracted_image_url or page.og_image
    else:
        recipe.source_url = ""
        recipe.extracted_image_url = None
    return recipe


def ocr_image_text(image_data_uri: str) -> str:
    """
    Paso 1 del flujo de foto: extrae el texto de la imagen con un modelo de visión.
    """
    settings = get_settings()
    client = get_client()
    content: List[dict] = [
        {"type": "text", "text": "Extract all text from this recipe image."},
        {"type": "image_url", "image_url": {"url": image_data_uri}},
    ]
    try:
        completion = client.chat.completions.create(
            model=settings.openai_model_vision,
            messages=[
                {"role": "system", "content": OCR_SYSTEM},
                {"role": "user", "content": content},
            ],
            temperature=0.2,
        )
    except OpenAIError as e:
        logger.exception("Error llamando a OpenAI para OCR")
        raise AIServiceError("El servicio de IA no respondió") from e

    return (completion.choices[0].message.content or "").strip()


def ocr_and_parse_recipe_from_image(image_data_uri: str, user_language_code: str | None = None) -> ParsedRecipe:
    """
    OCR + parseo de una foto de receta.

    Raises
    ------
    ValueError
        Si `image_data_uri` no es un data URI de imagen en base64.
    AIServiceError
        Si el OCR no extrae texto o el parseo falla.
    """
    if not _DATA_URI_RE.match(image_data_uri or ""):
        raise ValueError("Se esperaba un data URI de imagen: data:<mimetype>;base64,<datos>")

    ocr_text = ocr_image_text(image_data_uri)
    if not ocr_text:
        raise AIServiceError("La IA no extrajo texto de la imagen (OCR vacío)")
    logger.info(f"OCR extrajo {len(ocr_text)} caracteres")

    builder = RecipeBuilder(default_group_name=default_group_name(user_language_code))
    raw = _complete_recipe_json(builder, builder.build_prompt(ocr_text))
    recipe = builder.parse_document(raw)
    recipe.source_url = ""
    recipe.extracted_image_url = None
    return recipe


def suggest_recipe_image(recipe_title: str) -> str:
    """
    Genera una imagen ilustrativa (sin texto, apaisada) para la receta.

    Returns
    -------
    str
        Data URI `data:image/png;base64,...`.
    """
    title = (recipe_title or "").strip()
    if not title:
        raise ValueError("El título de la receta es obligatorio")

    settings = get_settings()
    client = get_client()
    logger.info(f"Generando imagen para: {title!r}")
    try:
        result = client.images.generate(
            model=settings.openai_model_image,
            prompt=get_image_prompt(title),
            size="1536x1024",
            quality="low",
            n=1,
        )
    except OpenAIError as e:
        logger.exception("Error generando imagen con OpenAI")
        raise AIServiceError("El servicio de IA no pudo generar la imagen") from e

    b64 = result.data[0].b64_json if result.data else None
    if not b64:
        raise AIServiceError("La IA no devolvió una imagen válida")

    uri = f"data:image/png;base64,{b64}"
    if len(uri) > LARGE_IMAGE_URI_LENGTH:
        logger.warning(f"La imagen generada para {title!r} es muy grande (data URI de {len(uri)} caracteres)")
    return uri
