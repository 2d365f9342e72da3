"""
Escalado de porciones.

Recalcula cantidades de ingredientes en proporción a un nuevo número de
porciones. Las cantidades son texto libre: se toma el prefijo numérico
(como `parseFloat`), aceptando coma decimal y fracciones ("1/2", "1 1/4").
Si no hay número, la cantidad se devuelve intacta.
"""

from __future__ import annotations

import copy
import math
import re
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Dict, List, Optional

DEFAULT_LANG = "no"

# Idiomas cuyo separador decimal es la coma
_COMMA_LANGS = {"no", "nb", "nn", "es"}

_MIXED_RE = re.compile(r"^\s*(\d+)\s+(\d+)\s*/\s*(\d+)")
_FRACTION_RE = re.compile(r"^\s*(\d+)\s*/\s*(\d+)")
_NUMBER_RE = re.compile(r"^\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")

_CENT = Decimal("0.01")
# Precisión suficiente para cuantizar cualquier float finito
_DECIMAL_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def decimal_separator(lang: Optional[str]) -> str:
    code = (lang or DEFAULT_LANG).strip().lower().split("-")[0].split("_")[0]
    return "," if code in _COMMA_LANGS else "."


def parse_quantity(quantity: Any) -> Optional[float]:
    """
    Extrae el valor numérico inicial de una cantidad.

    Returns
    -------
    float | None
        None si la cantidad no empieza con un número.
    """
    if quantity is None:
        return None
    if isinstance(quantity, (int, float)) and not isinstance(quantity, bool):
        return float(quantity)

    text = str(quantity).replace(",", ".", 1)

    m = _MIXED_RE.match(text)
    if m:
        whole, num, den = (int(g) for g in m.groups())
        return whole + num / den if den else None

    m = _FRACTION_RE.match(text)
    if m:
        num, den = (int(g) for g in m.groups())
        return num / den if den else None

    m = _NUMBER_RE.match(text)
    if m:
        return float(m.group(0))
    return None


def format_quantity(value: float, lang: Optional[str] = None) -> str:
    """
    Enteros sin decimales; el resto redondeado a 2 decimales (mitades hacia
    arriba, 0.125 -> 0.13) sin ceros finales.
    """
    rounded = Decimal(repr(float(value))).quantize(_CENT, context=_DECIMAL_CONTEXT)
    if rounded == rounded.to_integral_value():
        return str(int(rounded))
    text = f"{rounded:.2f}".rstrip("0").rstrip(".")
    return text.replace(".", decimal_separator(lang))


def scale_quantity(quantity: Any, original_servings: float, target_servings: float, lang: Optional[str] = None) -> str:
    """
    Escala una cantidad de `original_servings` a `target_servings`.

    Devuelve la cantidad original (como string) cuando no es numérica o
    alguno de los valores de porciones no es > 0. También cuando el
    valor o el resultado no son finitos ("1e999").

    Examples
    --------
    >>> scale_quantity("250", 4, 2)
    '125'
    >>> scale_quantity("1,5", 2, 3, "en")
    '2.25'
    >>> scale_quantity("a pinch", 4, 8)
    'a pinch'
    """
    original_text = "" if quantity is None else str(quantity)
    if not original_servings or not target_servings or original_servings <= 0 or target_servings <= 0:
        return original_text

    value = parse_quantity(quantity)
    if value is None or not math.isfinite(value):
        return original_text

    scaled = value / original_servings * target_servings
    if not math.isfinite(scaled):
        return original_text
    return format_quantity(scaled, lang)


def parse_servings_input(value: Any) -> float:
    """
    Valida el número de porciones pedido por el usuario ("3", "2,5", "1.5").

    Raises
    ------
    ValueError
        Si no es numérico, no es finito o no es > 0.
    """
    try:
        servings = float(str(value).strip().replace(",", "."))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Porciones inválidas: {value!r}") from e
    if not math.isfinite(servings):
        raise ValueError(f"Porciones inválidas: {value!r}")
    if servings <= 0:
        raise ValueError("Las porciones deben ser mayores a 0")
    return servings


def scale_groups(
    groups: List[Dict[str, Any]],
    original_servings: float,
    target_servings: float,
    lang: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Devuelve una copia de los grupos de ingredientes con cantidades escaladas.
    """
    scaled = copy.deepcopy(groups)
    for group in scaled:
        for ingredient in group.get("ingredients", []):
            ingredient["quantity"] = scale_quantity(
                ingredient.get("quantity", ""), original_servings, target_servings, lang
            )
    return scaled
