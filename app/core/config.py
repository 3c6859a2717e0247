from __future__ import annotations

import os


def _env_flag(name: str, default: str) -> bool:
    return (os.getenv(name, default) or "").strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite://")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # Seed the demo roster on startup when the store is empty.
    OFICIO_SEED_DEMO = _env_flag("OFICIO_SEED_DEMO", "true")
    # Baremo used by liquidaciones when the request does not name one.
    OFICIO_COMUNIDAD = os.getenv("OFICIO_COMUNIDAD", "Comunidad de Madrid")
