from __future__ import annotations

from flask import Blueprint

oficio_bp = Blueprint("oficio", __name__)

from app.oficio import routes  # noqa: E402,F401
