"""
Errores de dominio del core.

La capa HTTP (`api/`) los traduce a códigos de estado; el core nunca
importa FastAPI.
"""


class RecipeAppError(Exception):
    """Base de todos los errores de dominio."""


class NotFoundError(RecipeAppError, LookupError):
    """El recurso pedido no existe (404)."""


class PermissionDeniedError(RecipeAppError):
    """El usuario no puede operar sobre el recurso (403)."""


class ConflictError(RecipeAppError):
    """Choque con datos existentes, ej: email ya registrado (409)."""


class AuthenticationError(RecipeAppError):
    """Credenciales o token inválidos (401)."""


class AIServiceError(RecipeAppError):
    """El servicio de IA falló o devolvió datos inutilizables (502)."""
