from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app import create_app
from app.core.config import Config
from app.core.extensions import db
from app.core.models import seed_demo_data


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "test-secret"
    OFICIO_SEED_DEMO = False
    OFICIO_COMUNIDAD = "Comunidad de Madrid"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        seed_demo_data(db.session)
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def service(app):
    return app.extensions["oficio"]


@pytest.fixture
def nuevo_turno():
    def _payload(**overrides):
        payload = {
            "tipo": "penal",
            "partido_judicial": "Madrid",
            "fecha_inicio": "2026-02-24",
            "fecha_fin": "2026-02-28",
            "abogado_id": "ABG-001",
            "abogado_nombre": "María González",
        }
        payload.update(overrides)
        return payload

    return _payload
