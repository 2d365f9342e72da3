"""
Dominios del core.

Hoy existe uno solo (`recipes`), con modelos, prompts, builder, renderer y
reglas puras (normalización, escalado, búsqueda, reordenamiento).
"""
