"""Seed roles, the default permission matrix and an administrator user."""

import os

from app import create_app
from utils.seed import seed_all

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")


def main() -> None:
    app = create_app()
    with app.app_context():
        admin, action = seed_all(ADMIN_USERNAME, ADMIN_PASSWORD, ADMIN_EMAIL)
        print(f"Admin user {action}: {admin.username} <{admin.email}>")


if __name__ == "__main__":
    main()
