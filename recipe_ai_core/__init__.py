"""
recipe_ai_core
==============

Core de la aplicación de recetas: configuración, base de datos, lógica de
dominio (normalización, escalado, búsqueda, export) y flujos de IA.
No depende de FastAPI.
"""

__version__ = "0.1.0"
