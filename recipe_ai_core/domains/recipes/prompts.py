"""
Prompts para los flujos de IA de recetas (parseo, OCR e imagen).

Los prompts están en inglés; el modelo responde en el idioma de la receta.
"""

RECIPE_JSON_SCHEMA = """
{
  "title": "string (required)",
  "description": "string",
  "ingredient_groups": [
    {
      "name": "string (group name, e.g. 'For the dough'; may be empty)",
      "ingredients": [
        {"name": "string (ONLY the ingredient name)", "quantity": "string (e.g. '250', '1 1/4', '4-5')", "unit": "string (e.g. 'g', 'dl', 'ts')"}
      ]
    }
  ],
  "instructions": [{"text": "string (one step)"}],
  "tips": [{"text": "string"}],
  "servings_value": "integer or null",
  "servings_unit": "'servings' | 'pieces'",
  "prep_time": "string",
  "cook_time": "string",
  "tags": "comma-separated string",
  "categories": "comma-separated string",
  "extracted_image_url": "string or null"
}
""".strip()

RECIPE_PARSER_SYSTEM = f"""
You are an expert recipe parsing assistant. Your SOLE TASK is to ACCURATELY
EXTRACT information from the provided source (raw text, text fetched from a
web page, or text read from a photo) and structure it as JSON.

CRITICAL RULES
1. ONLY EXTRACT: use only information explicitly present in the source.
2. DO NOT INVENT OR MODIFY: never add, infer or "improve" content.
3. OMIT IF NOT FOUND: leave optional fields empty when the source lacks them.
4. INGREDIENT NAMES: the "name" field holds ONLY the ingredient name. Quantity
   and unit go to their own fields. "250 g hvetemel" -> name "hvetemel",
   quantity "250", unit "g". "1 1/4 ts bakepulver" -> name "bakepulver",
   quantity "1 1/4", unit "ts". Keep parenthetical notes that belong to the
   name ("epler (gjerne gule)"). Never add translations.
5. GROUPS: create one group per named ingredient section ("For the cake:").
   If there are no named sections, put everything in a single group named
   "{{default_group_name}}".
6. INSTRUCTIONS: one item per distinct step, as written, without numbering.
7. SERVINGS: "servings_unit" is "pieces" for items (buns, cookies, "stk"),
   otherwise "servings". Only fill "servings_value" if the yield is stated.
8. Keep the language of the source for every field.

Answer ONLY with valid JSON following this schema:
{RECIPE_JSON_SCHEMA}
""".strip()

OCR_SYSTEM = (
    "You read photos of recipes (cookbook pages, handwritten cards, screenshots). "
    "Extract ALL the text in the image, preserving line breaks, ingredient lines and "
    "step order as clearly as possible for later recipe parsing. "
    "Do not translate, summarize or add anything. Return only the extracted text."
)

IMAGE_PROMPT_TEMPLATE = (
    "A purely visual, appetizing food photograph of the dish \"{title}\". "
    "Landscape orientation, natural light, simple background. "
    "ABSOLUTELY NO TEXT, NO WORDS, NO LETTERS, NO TYPOGRAPHY in the image."
)


def get_recipe_parser_system_prompt(default_group_name: str = "Ingredients") -> str:
    return RECIPE_PARSER_SYSTEM.replace("{default_group_name}", default_group_name)


def get_image_prompt(title: str) -> str:
    return IMAGE_PROMPT_TEMPLATE.format(title=title.strip())
