#!/usr/bin/env python3
"""
Script helper para ejecutar la API FastAPI.
Ejecuta desde la raíz del proyecto para asegurar que Python encuentre el módulo 'api'.
"""

import os
import sys
from pathlib import Path

# Asegurar que el directorio raíz esté en el PYTHONPATH
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

if __name__ == "__main__":
    import uvicorn

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    reload = os.getenv("ENVIRONMENT", "local") == "local"

    print(f"🚀 Iniciando API FastAPI en http://localhost:{port}")
    print(f"📖 Documentación disponible en http://localhost:{port}/docs")
    uvicorn.run("api.main:app", host=host, port=port, reload=reload)
