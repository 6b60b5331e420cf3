from __future__ import annotations

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from campus_attendance.database.bootstrap import apply_seed_sql, ensure_admin


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config)
    admin_ready = ensure_admin(
        db_config,
        email=getattr(settings, "ADMIN_EMAIL", None),
        password=getattr(settings, "ADMIN_PASSWORD", None),
    )

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
        f" (admin={'yes' if admin_ready else 'skipped'})"
    )


if __name__ == "__main__":
    main()
