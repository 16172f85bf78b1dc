import logging

from flask import Flask

from configs import Config, configure_logging, db, login
from db.models.user import User
from blueprint import blue_print
from admin.setup import init_admin
from utils.rpc import fail, register_error_handlers

logger = logging.getLogger(__name__)


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    app.json.sort_keys = False

    configure_logging(app.config["LOG_LEVEL"])

    db.init_app(app)
    login.init_app(app)

    @login.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login.unauthorized_handler
    def unauthorized():
        return fail("UNAUTHORIZED", "Authentication required", 401)

    register_error_handlers(app)
    blue_print(app)
    if app.config.get("ENABLE_ADMIN", True):
        init_admin(app)

    logger.info("app ready (db=%s)", app.config.get("SQLALCHEMY_DATABASE_URI"))
    return app


if __name__ == "__main__":
    create_app().run(debug=True, host="0.0.0.0", port=5000)
