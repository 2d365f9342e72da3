"""
Tests de los flujos de IA: builder del prompt, parseo de la respuesta,
cliente OpenAI (con un cliente falso) y endpoints.
"""

import json
from types import SimpleNamespace

import pytest

from recipe_ai_core import llm_client
from recipe_ai_core.domains.recipes.builder import RecipeBuilder, SourcePage
from recipe_ai_core.domains.recipes.models import ParsedRecipe
from recipe_ai_core.errors import AIServiceError

LLM_RECIPE = {
    "title": "Kjøttboller",
    "description": "Saftige kjøttboller",
    "servings_value": "4",
    "servings_unit": "servings",
    "prep_time": "20 min",
    "cook_time": "25 min",
    "ingredient_groups": [
        {
            "name": "Ingredienser",
            "ingredients": [
                {"name": "500 g kjøttdeig", "quantity": "", "unit": ""},
                {"name": "løk", "quantity": "1", "unit": ""},
                {"name": "", "quantity": "2", "unit": "ss"},
            ],
        }
    ],
    "instructions": ["Bland alt.", {"text": "Form boller og stek."}],
    "tips": [],
    "tags": "middag, kjøtt",
    "categories": ["Middag"],
    "extracted_image_url": "",
}


class FakeCompletions:
    def __init__(self, contents):
        self.contents = list(contents)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        content = self.contents.pop(0)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeImages:
    def __init__(self, b64):
        self.b64 = b64
        self.calls = []

    def generate(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(data=[SimpleNamespace(b64_json=self.b64)])


class FakeClient:
    def __init__(self, contents=(), b64="aW1hZ2U="):
        self.chat = SimpleNamespace(completions=FakeCompletions(contents))
        self.images = FakeImages(b64)


@pytest.fixture
def fake_client(monkeypatch):
    def _install(*contents, b64="aW1hZ2U="):
        client = FakeClient(contents, b64=b64)
        monkeypatch.setattr(llm_client, "get_client", lambda: client)
        return client
    return _install


# ---------- Builder ----------

def test_builder_prompt_for_page_and_text():
    builder = RecipeBuilder("Ingredienser")
    assert "Ingredienser" in builder.get_system_prompt()

    page = SourcePage(url="https://example.com/r", text="Oppskrift...", og_image="https://example.com/img.jpg")
    prompt = builder.build_prompt("https://example.com/r", page=page)
    assert "https://example.com/r" in prompt
    assert "https://example.com/img.jpg" in prompt
    assert "Oppskrift..." in prompt

    plain = builder.build_prompt("3 egg, 2 dl melk")
    assert "3 egg, 2 dl melk" in plain


def test_parse_document_cleans_llm_output():
    recipe = RecipeBuilder().parse_document(json.dumps(LLM_RECIPE))
    assert isinstance(recipe, ParsedRecipe)
    assert recipe.servings_value == 4
    ingredients = recipe.ingredient_groups[0].ingredients
    assert (ingredients[0].name, ingredients[0].quantity) == ("g kjøttdeig", "500")
    assert len(ingredients) == 2
    assert recipe.instructions == ["Bland alt.", "Form boller og stek."]
    assert recipe.tags == ["middag", "kjøtt"]
    assert recipe.extracted_image_url is None


@pytest.mark.parametrize(
    "raw",
    [
        "no es json",
        json.dumps([1, 2]),
        json.dumps({**LLM_RECIPE, "title": ""}),
        json.dumps({**LLM_RECIPE, "instructions": []}),
        json.dumps({**LLM_RECIPE, "ingredient_groups": []}),
    ],
)
def test_parse_document_rejects_incomplete_output(raw):
    with pytest.raises(AIServiceError):
        RecipeBuilder().parse_document(raw)


# ---------- llm_client ----------

def test_llm_client_module_documents_flows():
    doc = llm_client.__doc__ or ""
    assert doc.lstrip().startswith("recipe_ai_core.llm_client")
    for name in ("parse_recipe_from_text", "ocr_and_parse_recipe_from_image", "suggest_recipe_image"):
        assert name in doc


def test_missing_api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "")
    with pytest.raises(AIServiceError):
        llm_client.get_client()


def test_parse_recipe_from_text(fake_client):
    client = fake_client(json.dumps({**LLM_RECIPE, "extracted_image_url": "https://x/y.jpg"}))
    recipe = llm_client.parse_recipe_from_text("Kjøttboller: 500 g kjøttdeig, 1 løk ...", "nb")

    assert recipe.title == "Kjøttboller"
    assert recipe.source_url == ""
    assert recipe.extracted_image_url is None
    call = client.chat.completions.calls[0]
    assert call["response_format"] == {"type": "json_object"}
    assert "Ingredienser" in call["messages"][0]["content"]


def test_parse_recipe_from_url(fake_client, monkeypatch):
    fake_client(json.dumps(LLM_RECIPE))
    page = SourcePage(url="https://example.com/kjottboller", text="Kjøttboller ...", og_image="https://example.com/k.jpg")
    monkeypatch.setattr(llm_client, "fetch_recipe_page", lambda url: page)

    recipe = llm_client.parse_recipe_from_text("https://example.com/kjottboller")
    assert recipe.source_url == "https://example.com/kjottboller"
    assert recipe.extracted_image_url == "https://example.com/k.jpg"


def test_parse_recipe_from_text_too_short():
    with pytest.raises(ValueError):
        llm_client.parse_recipe_from_text("egg")


def test_ocr_flow(fake_client):
    client = fake_client("Kjøttboller\n500 g kjøttdeig\nBland alt.", json.dumps(LLM_RECIPE))
    recipe = llm_client.ocr_and_parse_recipe_from_image("data:image/png;base64,aGVsbG8=", "es")

    assert recipe.title == "Kjøttboller"
    ocr_call, parse_call = client.chat.completions.calls
    image_part = ocr_call["messages"][1]["content"][1]
    assert image_part["image_url"]["url"] == "data:image/png;base64,aGVsbG8="
    assert "500 g kjøttdeig" in parse_call["messages"][1]["content"]


def test_ocr_rejects_non_data_uri():
    with pytest.raises(ValueError):
        llm_client.ocr_and_parse_recipe_from_image("https://example.com/img.png")


def test_ocr_empty_text(fake_client):
    fake_client("   ")
    with pytest.raises(AIServiceError):
        llm_client.ocr_and_parse_recipe_from_image("data:image/jpeg;base64,aGVsbG8=")


def test_suggest_image(fake_client):
    client = fake_client(b64="aW1hZ2U=")
    uri = llm_client.suggest_recipe_image("Kjøttboller")
    assert uri == "data:image/png;base64,aW1hZ2U="
    call = client.images.calls[0]
    assert call["size"] == "1536x1024"
    assert "Kjøttboller" in call["prompt"]


def test_image_bytes_to_data_uri():
    assert llm_client.image_bytes_to_data_uri(b"abc", "image/jpeg") == "data:image/jpeg;base64,YWJj"
    with pytest.raises(ValueError):
        llm_client.image_bytes_to_data_uri(b"abc", "application/pdf")
    with pytest.raises(ValueError):
        llm_client.image_bytes_to_data_uri(b"", "image/png")


# ---------- Endpoints ----------

def _parsed():
    return RecipeBuilder().parse_document(json.dumps(LLM_RECIPE))


def test_ai_endpoints_require_approved_user(client, pending_user, auth_headers):
    body = {"input_text": "Kjøttboller med saus"}
    assert client.post("/api/v1/ai/parse-text", json=body).status_code == 401
    resp = client.post("/api/v1/ai/parse-text", json=body, headers=auth_headers(pending_user))
    assert resp.status_code == 403


def test_parse_text_endpoint(client, user, auth_headers, monkeypatch):
    seen = {}

    def fake_parse(text, lang=None):
        seen["args"] = (text, lang)
        return _parsed()

    monkeypatch.setattr(llm_client, "parse_recipe_from_text", fake_parse)
    resp = client.post(
        "/api/v1/ai/parse-text",
        json={"input_text": "Kjøttboller med saus", "user_language_code": "no"},
        headers=auth_headers(user),
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Kjøttboller"
    assert seen["args"] == ("Kjøttboller med saus", "no")


def test_parse_text_endpoint_maps_errors(client, user, auth_headers, monkeypatch):
    def failing(text, lang=None):
        raise AIServiceError("El servicio de IA no respondió")

    monkeypatch.setattr(llm_client, "parse_recipe_from_text", failing)
    resp = client.post("/api/v1/ai/parse-text", json={"input_text": "Kjøttboller med saus"}, headers=auth_headers(user))
    assert resp.status_code == 502


def test_parse_text_endpoint_rejects_short_input(client, user, auth_headers):
    resp = client.post("/api/v1/ai/parse-text", json={"input_text": "egg"}, headers=auth_headers(user))
    assert resp.status_code == 400


def test_ocr_endpoint_json_and_multipart(client, user, auth_headers, monkeypatch):
    seen = []

    def fake_ocr(uri, lang=None):
        seen.append((uri, lang))
        return _parsed()

    monkeypatch.setattr(llm_client, "ocr_and_parse_recipe_from_image", fake_ocr)
    headers = auth_headers(user)

    resp = client.post(
        "/api/v1/ai/ocr",
        json={"image_data_uri": "data:image/png;base64,aGVsbG8=", "user_language_code": "es"},
        headers=headers,
    )
    assert resp.status_code == 200

    resp = client.post(
        "/api/v1/ai/ocr",
        files={"file": ("foto.jpg", b"hello", "image/jpeg")},
        data={"user_language_code": "no"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert seen == [
        ("data:image/png;base64,aGVsbG8=", "es"),
        ("data:image/jpeg;base64,aGVsbG8=", "no"),
    ]

    missing = client.post("/api/v1/ai/ocr", json={}, headers=headers)
    assert missing.status_code == 400


def test_suggest_image_endpoint(client, user, auth_headers, monkeypatch):
    monkeypatch.setattr(llm_client, "suggest_recipe_image", lambda title: f"data:image/png;base64,{title}")
    resp = client.post("/api/v1/ai/suggest-image", json={"recipe_title": "abc"}, headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json() == {"image_uri": "data:image/png;base64,abc"}
