"""
recipe_ai_core.cli
==================

Comandos de mantenimiento:

- `init-db`: crea las tablas (idempotente).
- `seed-admin`: crea `admin@example.com` con contraseña aleatoria si no hay
  ningún admin, y la imprime una única vez.
- `export-user <email> --format json|markdown|html|pdf [--lang] [--output]`:
  exporta todas las recetas creadas por un usuario.

Uso:
    python -m recipe_ai_core.cli init-db
    python -m recipe_ai_core.cli seed-admin
    python -m recipe_ai_core.cli export-user ana@example.com --format markdown
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import get_settings
from .db.database import get_db_session, init_db
from .db.helpers import get_user_by_email, seed_admin
from .db.recipes import list_recipes_created_by, recipe_to_dict
from .export import EXPORT_FORMATS, export_recipes


def cmd_init_db(args: argparse.Namespace) -> int:
    init_db()
    print("✅ Base de datos inicializada")
    return 0


def cmd_seed_admin(args: argparse.Namespace) -> int:
    init_db()
    with get_db_session() as session:
        result = seed_admin(session, email=args.email)
        if result is None:
            print("ℹ️  Ya existe un admin; no se creó ninguno.")
            return 0
        user, password = result
        print(f"✅ Admin creado: {user.email}")
        print(f"   Contraseña: {password}")
        print("   Cambiala después del primer login.")
    return 0


def cmd_export_user(args: argparse.Namespace) -> int:
    with get_db_session() as session:
        user = get_user_by_email(session, args.email)
        if user is None:
            print(f"❌ Usuario no encontrado: {args.email}", file=sys.stderr)
            return 1
        recipes = [recipe_to_dict(r, include_share_tokens=True) for r in list_recipes_created_by(session, user.id)]

    result = export_recipes(recipes, fmt=args.format, lang=args.lang)
    output = Path(args.output) if args.output else Path(get_settings().export_dir) / result.filename
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.content)
    print(f"✅ {len(recipes)} recetas exportadas en: {output.resolve()}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="recipe_ai_core", description="Herramientas de la app de recetas")
    sub = parser.add_subparsers(dest="command", required=True)

    p_init = sub.add_parser("init-db", help="Crear tablas")
    p_init.set_defaults(func=cmd_init_db)

    p_seed = sub.add_parser("seed-admin", help="Crear admin inicial")
    p_seed.add_argument("--email", default="admin@example.com")
    p_seed.set_defaults(func=cmd_seed_admin)

    p_export = sub.add_parser("export-user", help="Exportar recetas de un usuario")
    p_export.add_argument("email")
    p_export.add_argument("--format", choices=EXPORT_FORMATS, default="json")
    p_export.add_argument("--lang", default="en")
    p_export.add_argument("--output", default=None, help="Ruta del archivo de salida")
    p_export.set_defaults(func=cmd_export_user)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
