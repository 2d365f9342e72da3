# recipe_ai_core/config.py
from dataclasses import dataclass
from functools import lru_cache
import os

from dotenv import load_dotenv

"""
recipe_ai_core.config
=====================

Gestión centralizada de configuración de la aplicación.

Este módulo define:
- La estructura de configuración (`Settings`)
- El mecanismo para cargar variables desde entorno (.env)
- Un acceso único y cacheado a la configuración (`get_settings`)

Convenciones
------------
- Las variables de entorno se cargan desde un archivo `.env` si existe.
- Los defaults están pensados para desarrollo local.
- En producción, los valores deben venir del entorno real (Docker, CI, etc.).

Notas importantes
-----------------
- `load_dotenv()` se ejecuta al importar el módulo.
- Si una variable crítica (ej. API key de OpenAI o servidor SMTP) no está
  presente, el error se lanza (o se loguea) en el lugar donde se usa, no acá.
- `DATABASE_URL` la lee directamente `recipe_ai_core.db.database`.
"""

# Cargar variables de entorno desde .env (si existe)
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    try:
        return int(value) if value else default
    except ValueError:
        return default


@dataclass
class Settings:
    """
    Contenedor tipado de configuración global de la aplicación.

    Attributes
    ----------
    openai_api_key:
        API key de OpenAI. Debe estar presente para cualquier flujo de IA.
    openai_model_text:
        Modelo de texto usado para parsear recetas a JSON.
    openai_model_vision:
        Modelo con visión usado para el OCR de fotos de recetas.
    openai_model_image:
        Modelo de generación de imágenes (imagen ilustrativa de la receta).
    jwt_secret:
        Secreto HS256 para firmar los tokens de sesión.
    jwt_expire_minutes:
        Vida útil del token de sesión.
    app_base_url:
        URL pública del frontend (links de reset de contraseña y de administración).
    share_token_ttl_hours:
        Vida útil de los links de receta compartida.
    reset_token_ttl_minutes:
        Vida útil del token de reseteo de contraseña.
    export_dir:
        Directorio donde se escriben los PDFs exportados.
    """

    # OpenAI
    openai_api_key: str
    openai_model_text: str
    openai_model_vision: str
    openai_model_image: str

    # Auth
    jwt_secret: str
    jwt_expire_minutes: int = 60 * 24 * 7

    # URLs públicas
    app_base_url: str = "http://localhost:3000"

    # Email (SMTP)
    email_server_host: str = ""
    email_server_port: int = 587
    email_server_secure: bool = False
    email_server_user: str = ""
    email_server_password: str = ""
    email_from: str = ""

    # Tokens
    share_token_ttl_hours: int = 24 * 7
    reset_token_ttl_minutes: int = 60

    # I/O
    export_dir: str = "output"


@lru_cache
def get_settings() -> Settings:
    """
    Devuelve una instancia única y cacheada de `Settings`.

    Variables de entorno utilizadas
    -------------------------------
    - OPENAI_API_KEY
    - OPENAI_MODEL_TEXT (default: "gpt-4.1-mini")
    - OPENAI_MODEL_VISION (default: el modelo de texto)
    - OPENAI_MODEL_IMAGE (default: "gpt-image-1")
    - JWT_SECRET, JWT_EXPIRE_MINUTES
    - APP_BASE_URL
    - EMAIL_SERVER_HOST, EMAIL_SERVER_PORT, EMAIL_SERVER_SECURE,
      EMAIL_SERVER_USER, EMAIL_SERVER_PASSWORD, EMAIL_FROM
    - SHARE_TOKEN_TTL_HOURS, RESET_TOKEN_TTL_MINUTES
    - EXPORT_DIR

    Notas
    -----
    - Si `JWT_SECRET` no está definida se usa un valor de desarrollo.
      En producción SIEMPRE debe venir del entorno.
    - En tests se puede limpiar el cache con `get_settings.cache_clear()`.
    """
    model_text = os.getenv("OPENAI_MODEL_TEXT", "gpt-4.1-mini")
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_model_text=model_text,
        openai_model_vision=os.getenv("OPENAI_MODEL_VISION", model_text),
        openai_model_image=os.getenv("OPENAI_MODEL_IMAGE", "gpt-image-1"),

        jwt_secret=os.getenv("JWT_SECRET", "dev-secret-change-me"),
        jwt_expire_minutes=_env_int("JWT_EXPIRE_MINUTES", 60 * 24 * 7),

        app_base_url=os.getenv("APP_BASE_URL", "http://localhost:3000").rstrip("/"),

        email_server_host=os.getenv("EMAIL_SERVER_HOST", ""),
        email_server_port=_env_int("EMAIL_SERVER_PORT", 587),
        email_server_secure=_env_bool("EMAIL_SERVER_SECURE", False),
        email_server_user=os.getenv("EMAIL_SERVER_USER", ""),
        email_server_password=os.getenv("EMAIL_SERVER_PASSWORD", ""),
        email_from=os.getenv("EMAIL_FROM", ""),

        share_token_ttl_hours=_env_int("SHARE_TOKEN_TTL_HOURS", 24 * 7),
        reset_token_ttl_minutes=_env_int("RESET_TOKEN_TTL_MINUTES", 60),

        export_dir=os.getenv("EXPORT_DIR", "output"),
    )
