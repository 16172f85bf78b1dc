import logging

from flask import Blueprint, request
from flask_login import current_user, login_required, login_user, logout_user

from dao import user as user_dao
from schemas.auth import LoginIn, UserOut
from utils.rpc import dump, ok

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.post("/login")
def login():
    data = LoginIn.model_validate(request.get_json(silent=True) or {})
    user = user_dao.authenticate(data.username, data.password)
    login_user(user, remember=True)
    logger.info("user %s logged in", user.username)
    return ok(dump(user, UserOut))


@auth_bp.post("/logout")
def logout():
    if current_user.is_authenticated:
        logger.info("user %s logged out", current_user.username)
        logout_user()
    return ok(None)


@auth_bp.get("/me")
@login_required
def me():
    return ok(dump(current_user._get_current_object(), UserOut))
