"""
API HTTP para recipe-ai-core.

Esta capa expone endpoints REST sobre el core interno (recipe_ai_core):
autenticación local, recetas, lista de compras, export/import y flujos de IA.

La API está diseñada para ser consumida por:
- UI web
- Scripts de automatización (import/export)
"""
