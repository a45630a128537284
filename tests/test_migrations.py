# tests/test_migrations.py
import tempfile
import unittest
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ROOT = Path(__file__).resolve().parents[1]


class MigrationTests(unittest.TestCase):
    def test_upgrade_and_downgrade(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            url = f"sqlite:///{Path(tmp) / 'panel.db'}"
            cfg = Config(str(ROOT / "alembic.ini"))
            cfg.set_main_option("script_location", str(ROOT / "migrations"))
            cfg.set_main_option("sqlalchemy.url", url)
            cfg.attributes["configure_logger"] = False

            command.upgrade(cfg, "head")
            engine = create_engine(url)
            tables = set(inspect(engine).get_table_names())
            self.assertTrue({
                "admins", "resellers", "packages", "users", "playlists", "channels",
                "user_sessions", "user_agents", "activity_logs", "settings",
            } <= tables)
            foreign_keys = {fk["referred_table"]: fk["options"] for fk in inspect(engine).get_foreign_keys("users")}
            self.assertEqual(foreign_keys["packages"].get("ondelete"), "SET NULL")

            command.downgrade(cfg, "base")
            self.assertEqual(set(inspect(engine).get_table_names()) - {"alembic_version"}, set())
            engine.dispose()


if __name__ == "__main__":
    unittest.main()
