from __future__ import annotations

import logging

import click
import sqlalchemy as sa
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from app.core.config import Config
from app.core.extensions import db, migrate
from app.core.models import Turno, seed_demo_data
from app.core.utils import money
from app.oficio import oficio_bp
from app.oficio.services import OficioService

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def create_app(config_object: type[Config] | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.json.sort_keys = False

    configure_logging(app)
    db.init_app(app)
    migrate.init_app(app, db)

    with app.app_context():
        app.extensions["oficio"] = OficioService(db.session, app.config["OFICIO_COMUNIDAD"])
        if _is_memory_db(app):
            db.create_all()
        if app.config.get("OFICIO_SEED_DEMO"):
            _seed_if_empty(app)

    app.register_blueprint(oficio_bp)

    register_cli(app)
    register_routes(app)
    return app


def configure_logging(app: Flask) -> None:
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("app").setLevel(level)


def _is_memory_db(app: Flask) -> bool:
    uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    return uri in {"sqlite://", "sqlite:///:memory:"}


def _seed_if_empty(app: Flask) -> None:
    # Persistent databases get their schema from `flask db upgrade`.
    if not sa.inspect(db.engine).has_table(Turno.__tablename__):
        app.logger.warning("Demo seed skipped: schema missing, run `flask db upgrade`")
        return
    if db.session.query(Turno.id).first() is None:
        seed_demo_data(db.session)
        app.logger.info("Demo roster seeded")


def register_routes(app: Flask) -> None:
    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.errorhandler(400)
    def bad_request(error: HTTPException):
        return _error_response(error)

    @app.errorhandler(404)
    def not_found(error: HTTPException):
        return _error_response(error)

    @app.errorhandler(405)
    def method_not_allowed(error: HTTPException):
        return _error_response(error)


def _error_response(error: HTTPException):
    return jsonify({"error": error.description, "status": error.code}), error.code


def register_cli(app: Flask) -> None:
    @app.cli.command("seed-demo")
    @click.option("--reset", is_flag=True, help="Delete existing data before seed.")
    def seed_demo(reset: bool) -> None:
        """Seed the demo duty roster."""
        if reset:
            db.drop_all()
        db.create_all()
        if db.session.query(Turno.id).first() is None:
            seed_demo_data(db.session)
            click.echo("Demo data seeded.")
        else:
            click.echo("Seed skipped: existing turnos found.")

    @app.cli.command("oficio-estadisticas")
    def oficio_estadisticas() -> None:
        """Print the oficio statistics summary."""
        stats = app.extensions["oficio"].estadisticas()
        click.echo(f"actuaciones={stats.total_actuaciones} este_mes={stats.actuaciones_este_mes}")
        click.echo(f"ingresos={money(stats.ingresos_oficio)} horas={stats.horas_dedicadas}")
        for mes, cantidad in stats.actuaciones_por_mes.items():
            if cantidad:
                click.echo(f"  {mes}: {cantidad} actuaciones, {money(stats.ingresos_por_mes[mes])}")

    @app.cli.command("oficio-liquidacion")
    @click.option("--anio", type=int, required=True, help="Year to settle.")
    @click.option("--trimestre", type=click.Choice(["Q1", "Q2", "Q3", "Q4"]), required=True)
    @click.option("--comunidad", type=str, default=None, help="Baremo community (defaults to config).")
    def oficio_liquidacion(anio: int, trimestre: str, comunidad: str | None) -> None:
        """Quarterly settlement of actuaciones against a baremo."""
        try:
            liquidacion = app.extensions["oficio"].liquidacion(anio, trimestre, comunidad)
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"[{liquidacion.comunidad}] {anio}-{liquidacion.trimestre}")
        for linea in liquidacion.lineas.values():
            click.echo(f"  {linea.tipo_actuacion}: {linea.cantidad} -> {money(linea.importe)}")
        click.echo(f"total={money(liquidacion.importe_total)} actuaciones={liquidacion.total_actuaciones}")
