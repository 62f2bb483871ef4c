from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect, select

from doorprize.db.engine import get_sessionmaker, make_engine
from doorprize.models import StorageEntry


def upgrade_db(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to the requested revision."""
    project_root = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    command.upgrade(alembic_cfg, target_revision)


def print_summary() -> None:
    """Print the tables and the storage keys currently held in the database."""
    engine = make_engine()
    try:
        print("Current tables:", ", ".join(sorted(inspect(engine).get_table_names())))
        Session = get_sessionmaker(engine)
        with Session() as session:
            for entry in session.scalars(select(StorageEntry).order_by(StorageEntry.key)):
                size = len(entry.value) if isinstance(entry.value, list) else 1
                print(f"  {entry.key}: {size} item(s), updated {entry.updated_at}")
    finally:
        engine.dispose()


def main() -> None:
    """Apply migrations (default to head) and report the stored draw state."""
    upgrade_db()
    print_summary()


if __name__ == "__main__":
    main()
