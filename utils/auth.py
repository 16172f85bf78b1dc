# utils/auth.py
from functools import wraps
from flask_login import current_user

from utils.errors import Forbidden, Unauthorized


def roles_required(*roles):
    def deco(fn):
        @wraps(fn)
        def inner(*a, **kw):
            if not current_user.is_authenticated:
                raise Unauthorized("Authentication required")
            if not current_user.has_role(*roles):
                raise Forbidden("You do not have permission to perform this action")
            return fn(*a, **kw)

        return inner

    return deco
