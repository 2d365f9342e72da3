"""
Endpoints de export/import de recetas.

- GET  /api/v1/recipes/export?id=&format=json|markdown|html|pdf&lang=
- POST /api/v1/recipes/import
"""

from typing import Any, Optional
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

import logging

from recipe_ai_core.db.models import User
from recipe_ai_core.db.recipes import get_owned_recipe, import_recipes, list_recipes_created_by, recipe_to_dict
from recipe_ai_core.errors import RecipeAppError
from recipe_ai_core.export import export_recipes

from ..dependencies import get_current_user, get_db, http_error
from ..models.requests import ExportFormat

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/recipes", tags=["exports"])


def _content_disposition(filename: str) -> str:
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


@router.get("/export")
def get_export(
    id: Optional[str] = Query(None, description="Receta a exportar; sin id se exportan todas las propias"),
    format: ExportFormat = Query(ExportFormat.JSON),
    lang: str = Query("en"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Descarga una receta propia o la colección completa del usuario.

    Errores:
        403: la receta es de otro usuario
        404: la receta no existe
    """
    try:
        if id:
            recipes = [recipe_to_dict(get_owned_recipe(db, id, user), include_share_tokens=True)]
        else:
            recipes = [recipe_to_dict(r, include_share_tokens=True) for r in list_recipes_created_by(db, user.id)]
        result = export_recipes(recipes, fmt=format.value, lang=lang, single=bool(id))
    except HTTPException:
        raise
    except (RecipeAppError, ValueError) as e:
        raise http_error(e) from e
    except Exception as e:
        logger.exception(f"Error exportando recetas: {e}")
        raise HTTPException(status_code=500, detail="Error exporting recipes") from e

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": _content_disposition(result.filename)},
    )


@router.post("/import")
async def post_import(
    payload: Any = Body(..., description="Array de recetas en el formato de export"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Importa recetas. Omite títulos que el usuario ya tiene.
    """
    try:
        count, skipped = import_recipes(db, user, payload)
    except HTTPException:
        raise
    except ValueError as e:
        raise http_error(e) from e
    except Exception as e:
        logger.exception(f"Error importando recetas: {e}")
        raise HTTPException(status_code=500, detail="Error importing recipes") from e

    return {"message": "Recipes imported successfully", "count": count, "skipped_count": skipped}
