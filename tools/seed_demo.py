# tools/seed_demo.py
"""
Carga datos de demo para desarrollo local:
- un usuario aprobado `demo@example.com` (contraseña `demo1234`)
- dos recetas (una pública y una privada) con grupos, pasos y tips

Es idempotente: si el usuario o las recetas ya existen, no los duplica.

Uso:
    python tools/seed_demo.py
"""
from __future__ import annotations

from recipe_ai_core.db.database import get_db_session, init_db
from recipe_ai_core.db.helpers import create_user, get_user_by_email
from recipe_ai_core.db.recipes import create_recipe, list_recipes_created_by
from recipe_ai_core.domains.recipes.normalize import normalize_recipe_payload

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo1234"

DEMO_RECIPES = [
    {
        "title": "Eplekake",
        "description": "Saftig eplekake i rund form.",
        "servings_value": 10,
        "servings_unit": "servings",
        "prep_time": "20 min",
        "cook_time": "50 min",
        "is_public": True,
        "ingredient_groups": [
            {
                "name": "Røre",
                "ingredients": [
                    {"name": "smør", "quantity": "250", "unit": "g"},
                    {"name": "sukker", "quantity": "2,5", "unit": "dl"},
                    {"name": "egg", "quantity": "5", "unit": ""},
                    {"name": "hvetemel", "quantity": "4", "unit": "dl"},
                    {"name": "bakepulver", "quantity": "1 1/4", "unit": "ts"},
                ],
            },
            {
                "name": "Topping",
                "ingredients": [
                    {"name": "epler (gjerne gule)", "quantity": "4-5", "unit": ""},
                    {"name": "kanel", "quantity": "1", "unit": "ts"},
                ],
            },
        ],
        "instructions": [
            "Pisk smør og sukker hvitt.",
            "Tilsett eggene ett og ett.",
            "Vend inn mel og bakepulver.",
            "Ha røren i formen og legg eplebåter på toppen.",
            "Stek på 180 °C i ca. 50 minutter.",
        ],
        "tips": ["Server med vaniljesaus eller krem."],
        "tags": "kake, eple",
        "categories": "Baking, Norsk",
    },
    {
        "title": "Tortilla de papas",
        "description": "Tortilla clásica, jugosa por dentro.",
        "servings_value": 4,
        "is_public": False,
        "ingredient_groups": [
            {
                "name": "",
                "ingredients": [
                    {"name": "papas", "quantity": "600", "unit": "g"},
                    {"name": "huevos", "quantity": "6", "unit": ""},
                    {"name": "cebolla", "quantity": "1", "unit": ""},
                    {"name": "aceite de oliva", "quantity": "1,5", "unit": "dl"},
                ],
            }
        ],
        "instructions": [
            "Cortar papas y cebolla en láminas finas.",
            "Confitar en el aceite a fuego medio 20 minutos.",
            "Escurrir, mezclar con los huevos batidos y cuajar de ambos lados.",
        ],
        "tags": ["rápida", "vegetariana"],
        "categories": ["Cena"],
    },
]


def main():
    init_db()
    with get_db_session() as db:
        user = get_user_by_email(db, DEMO_EMAIL)
        if not user:
            user = create_user(db, DEMO_EMAIL, DEMO_PASSWORD, display_name="Demo", is_approved=True)
            print(f"✅ Usuario demo creado: {DEMO_EMAIL} / {DEMO_PASSWORD}")

        existing = {r.title for r in list_recipes_created_by(db, user.id)}
        for payload in DEMO_RECIPES:
            if payload["title"] in existing:
                continue
            recipe = create_recipe(db, user, normalize_recipe_payload(payload))
            print(f"✅ Receta creada: {recipe.title} ({'pública' if recipe.is_public else 'privada'})")

    print("Listo.")


if __name__ == "__main__":
    main()
