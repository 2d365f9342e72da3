"""
Endpoints de IA (solo usuarios aprobados).

- POST /api/v1/ai/parse-text: texto libre o URL → receta estructurada
- POST /api/v1/ai/ocr: foto (data URI en JSON o archivo multipart) → receta
- POST /api/v1/ai/suggest-image: título → imagen ilustrativa (data URI)
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

import logging

from recipe_ai_core import llm_client
from recipe_ai_core.db.models import User
from recipe_ai_core.errors import RecipeAppError

from ..dependencies import http_error, require_approved_user
from ..models.requests import OcrRequest, ParseTextRequest, SuggestImageRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ai", tags=["ai"])


@router.post("/parse-text")
async def parse_text(request: ParseTextRequest, user: User = Depends(require_approved_user)):
    try:
        recipe = await run_in_threadpool(
            llm_client.parse_recipe_from_text, request.input_text, request.user_language_code
        )
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    logger.info(f"Receta parseada para {user.id}: {recipe.title!r}")
    return recipe.to_dict()


@router.post("/ocr")
async def ocr(request: Request, user: User = Depends(require_approved_user)):
    """
    Acepta:
    - JSON `{"image_data_uri": "data:image/...;base64,...", "user_language_code": "no"}`
    - multipart/form-data con `file` (imagen) y opcional `user_language_code`
    """
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("multipart/form-data"):
            form = await request.form()
            upload = form.get("file")
            if upload is None or isinstance(upload, str):
                raise HTTPException(status_code=400, detail="Missing image file ('file')")
            data = await upload.read()
            image_data_uri = llm_client.image_bytes_to_data_uri(data, upload.content_type)
            lang = form.get("user_language_code") or None
        else:
            body = OcrRequest.model_validate(await request.json())
            image_data_uri = body.image_data_uri
            lang = body.user_language_code

        recipe = await run_in_threadpool(llm_client.ocr_and_parse_recipe_from_image, image_data_uri, lang)
    except HTTPException:
        raise
    except ValidationError as e:
        raise HTTPException(status_code=400, detail="Invalid request body") from e
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    return recipe.to_dict()


@router.post("/suggest-image")
async def suggest_image(request: SuggestImageRequest, user: User = Depends(require_approved_user)):
    try:
        image_uri = await run_in_threadpool(llm_client.suggest_recipe_image, request.recipe_title)
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    return {"image_uri": image_uri}
