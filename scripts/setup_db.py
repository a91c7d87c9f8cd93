"""Create the workforce schema, optionally loading the demo seed.

    python scripts/setup_db.py [--seed]
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.workforce_engine.workforce_engine.common.logs import configure_logging
from src.workforce_engine.workforce_engine.database.bootstrap import apply_schema, apply_seed_sql, list_tables


DATABASE_DIR = REPO_ROOT / "database"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Apply database/schema.sql (and seed.sql with --seed)")
    parser.add_argument("--seed", action="store_true", help="Also load the demo tenant, employees and shifts")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
    if args.seed:
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")

    tables = list_tables(db_config)
    print(f"OK: {target} ready (tables={len(tables)}{', seeded' if args.seed else ''})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
