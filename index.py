# index.py
from datetime import datetime

from flask import Blueprint, current_app

from utils.rpc import ok

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def home():
    return ok(
        {
            "service": current_app.config.get("SERVICE_NAME", "import-erp"),
            "status": "ok",
            "time": datetime.utcnow().isoformat(),
        }
    )
