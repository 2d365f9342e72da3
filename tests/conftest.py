"""
Configuración de pytest y fixtures compartidas.

La base es SQLite en memoria (StaticPool: una sola conexión compartida),
con el esquema recreado en cada test. La API usa la misma sesión que el
test a través de `dependency_overrides[get_db]`.
"""

import os

# Antes de importar la app: el lifespan llama a init_db() con esta URL
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["EMAIL_SERVER_HOST"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.dependencies import get_db
from api.main import app
from recipe_ai_core import security
from recipe_ai_core.config import get_settings
from recipe_ai_core.db.database import Base
from recipe_ai_core.db import models  # noqa: F401
from recipe_ai_core.db.helpers import create_user
from recipe_ai_core.db.recipes import create_recipe
from recipe_ai_core.domains.recipes.normalize import normalize_recipe_payload
from recipe_ai_core.security import create_access_token

engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """bcrypt con el mínimo de rondas para que los tests no tarden."""
    monkeypatch.setattr(security, "BCRYPT_ROUNDS", 4)


@pytest.fixture(autouse=True)
def clean_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_session():
    """Sesión nueva con el esquema recién creado."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """Cliente HTTP que comparte la sesión del test."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user(db_session):
    """Usuario aprobado."""
    return create_user(db_session, "ana@example.com", "secret123", display_name="Ana", is_approved=True)


@pytest.fixture
def other_user(db_session):
    return create_user(db_session, "bruno@example.com", "secret123", display_name="Bruno", is_approved=True)


@pytest.fixture
def pending_user(db_session):
    """Usuario registrado pero todavía sin aprobar."""
    return create_user(db_session, "carla@example.com", "secret123", display_name="Carla")


@pytest.fixture
def admin(db_session):
    return create_user(db_session, "admin@example.com", "adminpass", display_name="Admin", roles="admin", is_approved=True)


@pytest.fixture
def auth_headers():
    """Factory: headers Bearer con un JWT válido para `user`."""
    def _headers(user):
        token = create_access_token(user.id, user.role_list, user.is_approved)
        return {"Authorization": f"Bearer {token}"}
    return _headers


def _recipe_payload(**overrides):
    """Payload de receta completo, con dos grupos, pasos y tips."""
    payload = {
        "title": "Pannekaker",
        "description": "Tynne pannekaker til middag",
        "servings_value": 4,
        "servings_unit": "servings",
        "prep_time": "10 min",
        "cook_time": "20 min",
        "is_public": True,
        "ingredient_groups": [
            {
                "name": "Røre",
                "ingredients": [
                    {"name": "hvetemel", "quantity": "3", "unit": "dl"},
                    {"name": "melk", "quantity": "6", "unit": "dl"},
                    {"name": "egg", "quantity": "3", "unit": ""},
                ],
            },
            {
                "name": "Til steking",
                "ingredients": [{"name": "smør", "quantity": "1,5", "unit": "ss"}],
            },
        ],
        "instructions": ["Visp sammen mel og melk.", "Tilsett egg.", "Stek tynne pannekaker."],
        "tips": ["La røren svelle i 30 minutter."],
        "tags": ["middag", "rask"],
        "categories": ["Norsk"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def recipe_payload():
    return _recipe_payload


@pytest.fixture
def make_recipe(db_session):
    """Factory: crea una receta para `owner` a partir de `recipe_payload`."""
    def _make(owner, **overrides):
        return create_recipe(db_session, owner, normalize_recipe_payload(_recipe_payload(**overrides)))
    return _make
