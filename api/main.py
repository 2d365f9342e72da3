"""
API HTTP principal para recipe-ai-core.

Esta aplicación FastAPI expone endpoints REST sobre el core interno
(recipe_ai_core): usuarios, recetas, lista de compras, export/import y
flujos de IA.

Uso:
    uvicorn api.main:app --reload --port 8000
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from recipe_ai_core import __version__
from recipe_ai_core.db.database import init_db

from .routes import admin, ai, auth, exports, recipes, shopping_list, users

# Cargar variables de entorno
load_dotenv()

# Determinar ambiente
ENVIRONMENT = os.getenv("ENVIRONMENT", "local")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Configurar logging según ambiente
log_level = getattr(logging, LOG_LEVEL, logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
logger.info(f"🚀 Iniciando API en ambiente: {ENVIRONMENT}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Crear tablas si no existen
    init_db()
    yield


app = FastAPI(
    title="Recipe AI Core API",
    description="API para gestionar recetas con extracción e imágenes asistidas por IA",
    version=__version__,
    lifespan=lifespan,
)

# CORS: configurar según ambiente
cors_origins_str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001")
cors_origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]

logger.info(f"🌐 CORS origins configurados: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Registrar rutas (exports antes que recipes: /recipes/export no es un id)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(admin.router)
app.include_router(exports.router)
app.include_router(recipes.router)
app.include_router(shopping_list.router)
app.include_router(ai.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "recipe-ai-core-api"}


@app.get("/health")
async def health():
    """Health check detallado."""
    return {
        "status": "ok",
        "service": "recipe-ai-core-api",
        "version": __version__,
        "environment": ENVIRONMENT,
    }
