"""
Tests de la lógica pura de recetas (sin DB): normalización, escalado,
filtros de listado y reordenamiento.
"""

import pytest

from recipe_ai_core.domains.recipes.models import IngredientData, IngredientGroupData, RecipeData
from recipe_ai_core.domains.recipes.normalize import (
    normalize_recipe_payload,
    parse_servings_value,
    split_labels,
)
from recipe_ai_core.domains.recipes.reorder import move_item, reorder_recipe
from recipe_ai_core.domains.recipes.scaling import (
    format_quantity,
    parse_quantity,
    parse_servings_input,
    scale_groups,
    scale_quantity,
)
from recipe_ai_core.domains.recipes.search import collect_labels, filter_recipes


# ---------- Normalización ----------

def test_normalize_accepts_camel_case_export():
    data = normalize_recipe_payload(
        {
            "title": " Kanelboller ",
            "servingsValue": "12",
            "servingsUnit": "pieces",
            "prepTime": "30 min",
            "isPublic": True,
            "ingredientGroups": [{"name": "Deig", "ingredients": [{"name": "mel", "quantity": "1", "unit": "kg"}]}],
            "instructions": [{"text": "Elt deigen."}],
            "tags": [{"name": "bakst"}, {"name": "Bakst"}],
            "isChecked": True,
        }
    )
    assert data.title == "Kanelboller"
    assert data.servings_value == 12
    assert data.servings_unit == "pieces"
    assert data.prep_time == "30 min"
    assert data.is_public is True
    assert data.ingredient_groups[0].ingredients[0] == IngredientData("mel", "1", "kg")
    assert data.instructions == ["Elt deigen."]
    assert data.tags == ["bakst"]


def test_normalize_defaults():
    data = normalize_recipe_payload({"title": "Te", "servings_unit": "liters"})
    assert data.servings_value == 1
    assert data.servings_unit == "servings"
    assert data.is_public is False
    assert data.ingredient_groups == []


def test_normalize_requires_title():
    with pytest.raises(ValueError):
        normalize_recipe_payload({"title": "  "})


def test_split_labels():
    assert split_labels("a, B ,b,, c") == ["a", "B", "c"]
    assert split_labels(None) == []


@pytest.mark.parametrize("value,expected", [("4", 4), ("2,5", 2), (3.6, 4), (None, 1), ("", 1)])
def test_parse_servings_value(value, expected):
    assert parse_servings_value(value) == expected


@pytest.mark.parametrize("value", ["0", "-2", "mange", True])
def test_parse_servings_value_invalid(value):
    with pytest.raises(ValueError):
        parse_servings_value(value)


# ---------- Escalado ----------

@pytest.mark.parametrize(
    "quantity,expected",
    [
        ("250", 250.0),
        ("1,5", 1.5),
        ("1.5 dl", 1.5),
        ("1/2", 0.5),
        ("1 1/4", 1.25),
        ("2-3", 2.0),
        ("en klype", None),
        ("", None),
    ],
)
def test_parse_quantity(quantity, expected):
    assert parse_quantity(quantity) == expected


def test_format_quantity():
    assert format_quantity(3.0) == "3"
    assert format_quantity(0.3333333) == "0,33"
    assert format_quantity(2.5, "en") == "2.5"
    assert format_quantity(1.10, "es") == "1,1"


@pytest.mark.parametrize(
    "value,expected",
    [(0.125, "0.13"), (0.625, "0.63"), (0.375, "0.38"), (1.005, "1.01"), (2.675, "2.68")],
)
def test_format_quantity_rounds_half_up(value, expected):
    assert format_quantity(value, "en") == expected


def test_scale_quantity():
    assert scale_quantity("250", 4, 2) == "125"
    assert scale_quantity("1,5", 2, 3, "en") == "2.25"
    assert scale_quantity("1 1/4", 1, 2, "nb-NO") == "2,5"
    assert scale_quantity("en klype", 4, 8) == "en klype"
    assert scale_quantity("100", 0, 2) == "100"


def test_scale_quantity_eighths():
    assert scale_quantity("1", 8, 1, "en") == "0.13"
    assert scale_quantity("5", 8, 1, "en") == "0.63"
    assert scale_quantity("3", 8, 1) == "0,38"


def test_scale_quantity_keeps_non_finite_values():
    assert scale_quantity("1e999", 4, 2) == "1e999"
    assert scale_quantity("1e308 g", 1, 10) == "1e308 g"
    assert scale_quantity("2", 4, float("inf")) == "2"


def test_parse_servings_input():
    assert parse_servings_input("2,5") == 2.5
    assert parse_servings_input(3) == 3.0
    for bad in ("0", "-1", "abc", None, "inf", "-inf", "nan", "1e309"):
        with pytest.raises(ValueError):
            parse_servings_input(bad)


def test_scale_groups_does_not_mutate_input():
    groups = [{"name": "", "ingredients": [{"name": "mel", "quantity": "3", "unit": "dl"}]}]
    scaled = scale_groups(groups, 2, 4)
    assert scaled[0]["ingredients"][0]["quantity"] == "6"
    assert groups[0]["ingredients"][0]["quantity"] == "3"


# ---------- Filtros ----------

def _recipe(title, created_by, is_public, tags=(), categories=(), ingredients=()):
    return {
        "title": title,
        "description": "",
        "created_by": created_by,
        "is_public": is_public,
        "tags": list(tags),
        "categories": list(categories),
        "ingredient_groups": [{"name": "", "ingredients": [{"name": n} for n in ingredients]}],
    }


RECIPES = [
    _recipe("Lasagne", "u1", True, tags=["Pasta"], categories=["Middag"], ingredients=["kjøttdeig"]),
    _recipe("Taco", "u1", False, tags=["fredag"], categories=["Middag"]),
    _recipe("Vafler", "u2", True, tags=["søtt"], categories=["Dessert"], ingredients=["Egg"]),
]


def test_filter_visibility():
    def titles(**kw):
        return [r["title"] for r in filter_recipes(RECIPES, "u1", **kw)]

    assert titles() == ["Lasagne", "Taco", "Vafler"]
    assert titles(visibility="my-private") == ["Taco"]
    assert titles(visibility="community-public") == ["Vafler"]
    assert [r["title"] for r in filter_recipes(RECIPES, None, visibility="my-all")] == []


def test_filter_category_tag_and_term():
    assert [r["title"] for r in filter_recipes(RECIPES, "u1", tag="pasta")] == ["Lasagne"]
    assert [r["title"] for r in filter_recipes(RECIPES, "u1", category="middag", tag="søtt")] == ["Lasagne", "Taco"]
    assert [r["title"] for r in filter_recipes(RECIPES, "u1", term="EGG")] == ["Vafler"]


def test_filter_rejects_unknown_visibility():
    with pytest.raises(ValueError):
        filter_recipes(RECIPES, "u1", visibility="all")


def test_collect_labels():
    labels = collect_labels(RECIPES)
    assert labels["tags"] == ["fredag", "Pasta", "søtt"]
    assert labels["categories"] == ["Dessert", "Middag"]


# ---------- Reordenamiento ----------

def test_move_item():
    assert move_item([1, 2, 3, 4], 0, 2) == [2, 3, 1, 4]
    assert move_item([1, 2, 3], 2, 0) == [3, 1, 2]
    assert move_item([1, 2, 3], 0, 99) == [2, 3, 1]
    with pytest.raises(IndexError):
        move_item([1], 3, 0)


def _data():
    return RecipeData(
        title="Test",
        ingredient_groups=[
            IngredientGroupData("A", [IngredientData("a1"), IngredientData("a2")]),
            IngredientGroupData("B", [IngredientData("b1")]),
        ],
        instructions=["s1", "s2"],
        tips=["t1", "t2"],
    )


def test_reorder_groups_and_tips():
    data = reorder_recipe(_data(), "ingredient_groups", 1, 0)
    assert [g.name for g in data.ingredient_groups] == ["B", "A"]

    data = reorder_recipe(_data(), "tips", 1, 0)
    assert data.tips == ["t2", "t1"]


def test_reorder_ingredient_between_groups():
    data = reorder_recipe(_data(), "ingredients", 1, 1, group_index=0, to_group_index=1)
    assert [i.name for i in data.ingredient_groups[0].ingredients] == ["a1"]
    assert [i.name for i in data.ingredient_groups[1].ingredients] == ["b1", "a2"]


@pytest.mark.parametrize(
    "section,kwargs",
    [
        ("steps", {}),
        ("instructions", {"from_index": 7}),
        ("ingredients", {"group_index": 5}),
    ],
)
def test_reorder_invalid(section, kwargs):
    args = {"from_index": 0, "to_index": 0}
    args.update(kwargs)
    with pytest.raises(ValueError):
        reorder_recipe(_data(), section, **args)
