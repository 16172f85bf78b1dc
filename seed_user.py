from dao import user as user_dao
from db.models.user import UserRole
from app import create_app

USERS = [
    ("admin", "System Admin", UserRole.ADMIN),
    ("sales1", "Sales Representative", UserRole.SALES),
    ("buyer1", "Purchasing Buyer", UserRole.PURCHASING),
    ("warehouse1", "Warehouse Staff", UserRole.WAREHOUSE),
    ("accountant1", "Finance Accountant", UserRole.ACCOUNTING),
]


def seed_users(password: str = "1"):
    for username, full_name, role in USERS:
        if user_dao.get_by_username(username):
            print(f"- {username} exists, skipped")
            continue
        user_dao.create_user(username, password, role=role, full_name=full_name)
        print(f"✓ {username} ({role.value})")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        seed_users()
        print("✅ Seeded users with all defined roles")
