"""
Dominio de recetas de cocina.

- Modelos de datos planos (RecipeData, ParsedRecipe)
- Normalización de payloads, escalado de porciones, búsqueda y reordenamiento
- Prompts, builder (JSON de la IA) y renderer (Markdown/HTML)
- Etiquetas localizadas para exports
"""
