"""
Modelos de request para la API.

Estos modelos definen la estructura esperada de los requests HTTP,
validando tipos antes de pasarlos al core. La normalización fina
(recortes, descartes, duplicados) la hace `recipe_ai_core`.
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Theme(str, Enum):
    """Tema de la UI elegible por el usuario."""

    LIGHT = "light"
    DARK = "dark"


class ServingsUnit(str, Enum):
    SERVINGS = "servings"
    PIECES = "pieces"


class ReorderSection(str, Enum):
    """Sección de la receta a reordenar."""

    INGREDIENT_GROUPS = "ingredient_groups"
    INGREDIENTS = "ingredients"
    INSTRUCTIONS = "instructions"
    TIPS = "tips"


class ExportFormat(str, Enum):
    JSON = "json"
    MARKDOWN = "markdown"
    HTML = "html"
    PDF = "pdf"


# ============================================================
# Auth / usuario
# ============================================================

class SignupRequest(BaseModel):
    email: str = Field(..., description="Email del usuario")
    password: str = Field(..., description="Contraseña (mínimo 6 caracteres)")
    display_name: Optional[str] = Field(default=None, description="Nombre visible (mínimo 2 caracteres)")


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str


class ProfileUpdateRequest(BaseModel):
    """
    Cambiar email o contraseña exige `current_password`.
    """

    display_name: Optional[str] = None
    email: Optional[str] = None
    new_password: Optional[str] = None
    current_password: Optional[str] = None


class ThemeRequest(BaseModel):
    theme: str = Field(..., description="light | dark")


class RolesRequest(BaseModel):
    new_roles: object = Field(..., description="Lista de roles, ej: ['user', 'admin']")


# ============================================================
# Recetas
# ============================================================

class IngredientIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = ""
    quantity: Optional[Union[str, float, int]] = ""
    unit: Optional[str] = ""


class IngredientGroupIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = ""
    ingredients: List[IngredientIn] = Field(default_factory=list)


class StepIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = ""


class RecipeIn(BaseModel):
    """
    Payload de creación/edición de receta.

    Campos inmutables (`id`, `created_by`, ratings, timestamps) y campos de
    solo-cliente se ignoran.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., description="Título de la receta")
    description: Optional[str] = ""
    servings_value: Optional[Union[int, float, str]] = 1
    servings_unit: Optional[ServingsUnit] = ServingsUnit.SERVINGS
    prep_time: Optional[str] = ""
    cook_time: Optional[str] = ""
    image_url: Optional[str] = ""
    source_url: Optional[str] = ""
    is_public: bool = False
    ingredient_groups: List[IngredientGroupIn] = Field(default_factory=list)
    instructions: List[Union[StepIn, str]] = Field(default_factory=list)
    tips: List[Union[StepIn, str]] = Field(default_factory=list)
    tags: Union[List[str], str, None] = None
    categories: Union[List[str], str, None] = None


class RateRequest(BaseModel):
    rating: int = Field(..., description="0..5; 0 elimina la valoración del usuario")


class ReorderRequest(BaseModel):
    section: ReorderSection
    from_index: int
    to_index: int
    group_index: Optional[int] = Field(default=None, description="Grupo de origen (solo ingredients)")
    to_group_index: Optional[int] = Field(default=None, description="Grupo de destino (solo ingredients)")


# ============================================================
# Lista de compras
# ============================================================

class ShoppingItemIn(BaseModel):
    name: str
    quantity: Optional[str] = ""
    unit: Optional[str] = ""


class ShoppingBulkRequest(BaseModel):
    items: List[ShoppingItemIn]


class FromRecipeRequest(BaseModel):
    servings: Optional[Union[float, str]] = Field(default=None, description="Porciones destino (escala cantidades)")
    lang: Optional[str] = None


# ============================================================
# IA
# ============================================================

class ParseTextRequest(BaseModel):
    input_text: str = Field(..., description="Texto de la receta o URL http(s)")
    user_language_code: Optional[str] = None


class OcrRequest(BaseModel):
    image_data_uri: str = Field(..., description="data:<mimetype>;base64,<datos>")
    user_language_code: Optional[str] = None


class SuggestImageRequest(BaseModel):
    recipe_title: str
