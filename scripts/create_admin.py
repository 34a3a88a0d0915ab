import os

from agrovision.core.config import get_settings
from agrovision.db.init_db import ensure_admin
from agrovision.db.session import Database


def main() -> None:
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    name = os.getenv("ADMIN_NAME", "Administrador")
    reset = os.getenv("ADMIN_RESET_PASSWORD", "").strip().lower() in {"1", "true", "yes"}
    if not email or not password:
        raise SystemExit("ADMIN_EMAIL e ADMIN_PASSWORD devem estar definidos.")

    database = Database(get_settings().DATABASE_URL)
    database.connect()
    try:
        database.create_schema()
        with database.session() as db:
            account = ensure_admin(db, email, password, name, reset_password=reset)
            print(f"Admin ativo: {account.email} (id={account.id})")
    finally:
        database.disconnect()


if __name__ == "__main__":
    main()
