from typing import List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from configs import db
from dao import _tx
from db.models.user import User, UserRole
from utils.errors import Conflict, Forbidden, Unauthorized


def list_users() -> List[User]:
    return User.query.order_by(User.username.asc()).all()


def get_user(user_id) -> Optional[User]:
    return db.session.get(User, int(user_id))


def get_by_username(username: str) -> Optional[User]:
    return User.query.filter_by(username=username.strip()).first()


def authenticate(username: str, password: str) -> User:
    user = get_by_username(username or "")
    if not user or not check_password_hash(user.password_hash, password or ""):
        raise Unauthorized("Invalid username or password")
    if not user.is_active:
        raise Forbidden("Account is disabled")
    return user


def create_user(
    username: str,
    password: str,
    role: UserRole = UserRole.SALES,
    full_name: str | None = None,
    email: str | None = None,
    is_active: bool = True,
) -> User:
    if get_by_username(username):
        raise Conflict("Username already exists")
    u = User(
        username=username.strip(),
        password_hash=generate_password_hash(password),
        role=role,
        full_name=full_name,
        email=email,
        is_active=is_active,
    )
    db.session.add(u)
    _tx.commit()
    return u
