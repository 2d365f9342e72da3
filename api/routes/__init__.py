"""Rutas de la API."""

from . import admin, ai, auth, exports, recipes, shopping_list, users

__all__ = ["admin", "ai", "auth", "exports", "recipes", "shopping_list", "users"]
