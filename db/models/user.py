# db/models/user.py
import enum
from datetime import datetime
from configs import db
from flask_login import UserMixin


class UserRole(enum.Enum):
    ADMIN = "ADMIN"
    SALES = "SALES"
    PURCHASING = "PURCHASING"
    WAREHOUSE = "WAREHOUSE"
    ACCOUNTING = "ACCOUNTING"


class User(db.Model, UserMixin):
    __tablename__ = "user_account"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(120))
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    role = db.Column(db.Enum(UserRole), default=UserRole.SALES, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def get_id(self):
        return str(self.id)

    def has_role(self, *roles: UserRole):
        """True when the user holds one of the given roles."""
        return self.role in roles
