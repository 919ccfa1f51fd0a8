#!/usr/bin/env python3
"""
Script para gestionar migraciones de base de datos con Alembic.

La configuración se arma en código (sin alembic.ini): los scripts viven en
repcell/migrations y la URL sale de settings.
"""
import sys
from pathlib import Path

from alembic.config import Config
from alembic import command
from repcell.core.config import settings

root_dir = Path(__file__).parent


def get_alembic_config() -> Config:
    """Obtener configuración de Alembic."""
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(root_dir / "repcell" / "migrations"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return alembic_cfg


def create_migration(message: str):
    """Crear nueva migración."""
    command.revision(get_alembic_config(), autogenerate=True, message=message)
    print(f"Migración creada: {message}")


def run_migrations():
    """Ejecutar migraciones pendientes."""
    command.upgrade(get_alembic_config(), "head")
    print("Migraciones ejecutadas exitosamente")


def rollback_migration():
    """Rollback de la última migración."""
    command.downgrade(get_alembic_config(), "-1")
    print("Rollback ejecutado exitosamente")


def show_history():
    command.history(get_alembic_config())


def show_current():
    command.current(get_alembic_config())


ACTIONS = {
    "upgrade": run_migrations,
    "downgrade": rollback_migration,
    "history": show_history,
    "current": show_current,
}


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Uso:")
        print("  python migrate.py create 'message'  # Crear migración")
        print("  python migrate.py upgrade            # Ejecutar migraciones")
        print("  python migrate.py downgrade          # Rollback")
        print("  python migrate.py history            # Ver historial")
        print("  python migrate.py current            # Ver actual")
        sys.exit(1)

    action = sys.argv[1]

    if action == "create":
        if len(sys.argv) < 3:
            print("Error: Se requiere un mensaje para la migración")
            sys.exit(1)
        create_migration(sys.argv[2])
    elif action in ACTIONS:
        ACTIONS[action]()
    else:
        print(f"Acción desconocida: {action}")
        sys.exit(1)
