# tests/test_migrations.py
# PURPOSE: the Alembic history builds the same tables the ORM expects.

import os
import tempfile

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


def _alembic_config(db_url: str) -> Config:
    cfg = Config(os.path.join(PROJECT_ROOT, "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    # keep pytest's logging setup intact
    cfg.attributes["configure_logger"] = False
    return cfg


def test_upgrade_and_downgrade():
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    db_url = f"sqlite:///{tmp.name}"
    cfg = _alembic_config(db_url)
    engine = create_engine(db_url)
    try:
        command.upgrade(cfg, "head")
        insp = inspect(engine)
        assert {"users", "tasks", "revoked_tokens"} <= set(insp.get_table_names())
        columns = {c["name"] for c in insp.get_columns("tasks")}
        assert columns == {
            "id", "user_id", "title", "description", "due_date",
            "priority", "status", "created_at", "updated_at",
        }

        command.downgrade(cfg, "base")
        assert "tasks" not in inspect(engine).get_table_names()
    finally:
        engine.dispose()
        os.unlink(tmp.name)
