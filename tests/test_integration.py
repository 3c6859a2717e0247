from __future__ import annotations

import sqlalchemy as sa

from app import create_app
from app.core.config import Config
from app.core.extensions import db


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_turnos_list_and_filters(client):
    response = client.get("/turnos")
    assert response.status_code == 200
    rows = response.get_json()
    assert [row["id"] for row in rows] == ["TURNO-001", "TURNO-002", "TURNO-003", "TURNO-004", "TURNO-005"]
    assert rows[0]["fecha_inicio"] == "2026-02-24"
    assert rows[0]["estado"] == "confirmado"

    by_lawyer = client.get("/turnos?abogado_id=ABG-001").get_json()
    assert [row["id"] for row in by_lawyer] == ["TURNO-001", "TURNO-004"]

    by_date = client.get("/turnos?fecha=2026-03-05").get_json()
    assert [row["id"] for row in by_date] == ["TURNO-003", "TURNO-004", "TURNO-005"]

    by_type = client.get("/turnos?tipo=violencia_genero").get_json()
    assert [row["id"] for row in by_type] == ["TURNO-004"]

    assert client.get("/turnos?fecha=05/03/2026").status_code == 400
    assert client.get("/turnos?activos=quizas").status_code == 400


def test_turno_detail_and_missing(client):
    response = client.get("/turnos/TURNO-003")
    assert response.status_code == 200
    assert response.get_json()["abogado_nombre"] == "Ana López"

    missing = client.get("/turnos/TURNO-404")
    assert missing.status_code == 404
    assert missing.get_json()["status"] == 404


def test_create_turno(client):
    response = client.post(
        "/turnos",
        json={
            "tipo": "civil",
            "partido_judicial": "Getafe",
            "fecha_inicio": "2026-03-09",
            "fecha_fin": "2026-03-15",
            "abogado_id": "ABG-005",
            "abogado_nombre": "Laura Fernández",
        },
    )
    assert response.status_code == 201
    body = response.get_json()
    assert body["id"] == "TURNO-006"
    assert body["estado"] == "asignado"

    assert client.get("/turnos/TURNO-006").status_code == 200


def test_create_turno_with_missing_field_is_rejected(client):
    response = client.post(
        "/turnos",
        json={"tipo": "civil", "fecha_inicio": "2026-03-09", "fecha_fin": "2026-03-15"},
    )
    assert response.status_code == 400
    assert "partido_judicial" in response.get_json()["error"]
    assert len(client.get("/turnos").get_json()) == 5


def test_turno_state_and_lawyer_changes(client):
    response = client.patch("/turnos/TURNO-002/estado", json={"estado": "cancelado"})
    assert response.status_code == 200
    assert response.get_json()["estado"] == "cancelado"

    activos = client.get("/turnos?activos=1").get_json()
    assert "TURNO-002" not in [row["id"] for row in activos]

    assert client.patch("/turnos/TURNO-002/estado", json={"estado": "pausado"}).status_code == 400
    assert client.patch("/turnos/TURNO-404/estado", json={"estado": "cancelado"}).status_code == 404

    reassigned = client.patch("/turnos/TURNO-003/abogado", json={"abogado_id": "ABG-002"})
    assert reassigned.status_code == 200
    assert reassigned.get_json()["abogado_nombre"] == "Carlos Ruiz"


def test_swap_endpoint(client):
    response = client.post("/turnos/intercambio", json={"turno_id_1": "TURNO-001", "turno_id_2": "TURNO-002"})
    assert response.status_code == 200
    first, second = response.get_json()
    assert first["abogado_nombre"] == "Carlos Ruiz"
    assert second["abogado_nombre"] == "María González"
    assert first["tipo"] == "penal"

    missing = client.post("/turnos/intercambio", json={"turno_id_1": "TURNO-001", "turno_id_2": "TURNO-404"})
    assert missing.status_code == 404
    assert client.get("/turnos/TURNO-001").get_json()["abogado_nombre"] == "Carlos Ruiz"


def test_guardias_flow(client):
    assert [g["id"] for g in client.get("/guardias?pendientes=1").get_json()] == ["GUARD-003"]
    assert len(client.get("/turnos/TURNO-001/guardias").get_json()) == 2

    response = client.post(
        "/guardias",
        json={
            "turno_id": "TURNO-003",
            "fecha": "2026-03-02",
            "hora_inicio": "20:00",
            "hora_fin": "08:00",
            "tipo": "localizable",
        },
    )
    assert response.status_code == 201
    guardia = response.get_json()
    assert guardia["id"] == "GUARD-004"
    assert guardia["confirmada"] is False

    for _ in range(2):
        confirmed = client.patch("/guardias/GUARD-004/confirmar")
        assert confirmed.status_code == 200
        assert confirmed.get_json()["confirmada"] is True

    assert client.patch("/guardias/GUARD-404/confirmar").status_code == 404
    bad = client.post(
        "/guardias",
        json={"turno_id": "TURNO-003", "fecha": "2026-03-02", "hora_inicio": "8h", "hora_fin": "20:00", "tipo": "presencial"},
    )
    assert bad.status_code == 400


def test_actuaciones_flow(client):
    rows = client.get("/actuaciones").get_json()
    assert [row["id"] for row in rows] == ["ACT-OF-004", "ACT-OF-003", "ACT-OF-002", "ACT-OF-001"]
    assert rows[3]["importe"] == "150.50"

    response = client.post(
        "/actuaciones",
        json={
            "turno_id": "TURNO-004",
            "tipo_actuacion": "orden_proteccion",
            "juzgado": "Juzgado de Violencia de Género nº 1",
            "numero_procedimiento": "0000321/2026",
            "fecha": "2026-03-03",
            "hora_inicio": "12:00",
            "hora_fin": "13:30",
            "importe": 120.75,
            "expediente_id": "EXP-2026-014",
        },
    )
    assert response.status_code == 201
    created = response.get_json()
    assert created["id"] == "ACT-OF-005"
    assert created["importe"] == "120.75"
    assert created["expediente_id"] == "EXP-2026-014"

    assert client.get("/actuaciones").get_json()[0]["id"] == "ACT-OF-005"
    assert [row["id"] for row in client.get("/actuaciones?sin_facturar=1").get_json()] == ["ACT-OF-005", "ACT-OF-003"]
    assert client.get("/actuaciones/ACT-OF-404").status_code == 404
    assert client.post("/actuaciones", json={"turno_id": "TURNO-404"}).status_code == 404


def test_catalogues(client):
    abogados = client.get("/abogados").get_json()
    assert len(abogados) == 5
    assert abogados[0]["turnos_inscritos"] == ["penal", "violencia_genero"]
    disponibles = client.get("/abogados?disponibles=1").get_json()
    assert "ABG-004" not in [row["id"] for row in disponibles]

    partidos = client.get("/partidos-judiciales").get_json()
    assert [p["nombre"] for p in partidos][:2] == ["Madrid", "Alcalá de Henares"]


def test_configuracion_endpoints(client):
    assert client.get("/oficio/configuracion").get_json()["frecuencia_rotacion"] == "semanal"

    response = client.patch("/oficio/configuracion", json={"rotacion_automatica": False})
    assert response.status_code == 200
    body = response.get_json()
    assert body["rotacion_automatica"] is False
    assert body["alerta_horas_antes"] == 24

    assert client.patch("/oficio/configuracion", json={"zona": "norte"}).status_code == 400


def test_estadisticas_endpoint(client):
    response = client.get("/oficio/estadisticas?hoy=2026-02-25")
    assert response.status_code == 200
    body = response.get_json()
    assert body["total_actuaciones"] == 4
    assert body["ingresos_oficio"] == "560.50"
    assert body["horas_dedicadas"] == 6.5
    assert body["actuaciones_por_mes"][1] == {"mes": "Feb", "cantidad": 4}
    assert body["comparacion_ingresos"] == {"oficio": "560.50", "privado": "1289.15"}

    assert client.get("/oficio/estadisticas?hoy=ayer").status_code == 400


def test_baremos_and_liquidacion(client):
    assert len(client.get("/oficio/baremos").get_json()) == 7
    galicia = client.get("/oficio/baremos?comunidad=galicia").get_json()
    assert galicia["items"][0]["id"] == "BG-001"
    assert client.get("/oficio/baremos?comunidad=Murcia").status_code == 404

    liquidacion = client.get("/oficio/liquidacion?anio=2026&trimestre=Q1").get_json()
    assert liquidacion["importe_total"] == "560.50"
    assert liquidacion["total_actuaciones"] == 4
    assert client.get("/oficio/liquidacion?anio=2026&trimestre=Q9").status_code == 400

    export = client.get("/oficio/liquidacion.csv?anio=2026&trimestre=Q1&comunidad=Galicia")
    assert export.status_code == 200
    assert export.headers["Content-Type"].startswith("text/csv")
    assert "liquidacion-2026-Q1.csv" in export.headers["Content-Disposition"]
    assert export.data.decode("utf-8").splitlines()[0].startswith("id,fecha,tipo_actuacion")


def test_catalogos_follow_language(client):
    es = client.get("/oficio/catalogos").get_json()
    assert es["lang"] == "es"
    assert es["estados_turno"]["cancelado"] == "Cancelado"

    ca = client.get("/oficio/catalogos?lang=ca").get_json()
    assert ca["estados_turno"]["cancelado"] == "Cancel·lat"

    header = client.get("/oficio/catalogos", headers={"Accept-Language": "ca-ES,ca;q=0.9"}).get_json()
    assert header["lang"] == "ca"


def test_unknown_method_returns_json(client):
    response = client.delete("/turnos")
    assert response.status_code == 405
    assert response.get_json()["status"] == 405


def test_abogado_detail_lists_assigned_turnos(client):
    response = client.get("/abogados/ABG-001")
    assert response.status_code == 200
    body = response.get_json()
    assert body["nombre"] == "María González"
    assert [t["id"] for t in body["turnos"]] == ["TURNO-001", "TURNO-004"]

    assert client.get("/abogados/ABG-404").status_code == 404


def test_cli_commands(app):
    runner = app.test_cli_runner()

    stats = runner.invoke(args=["oficio-estadisticas"])
    assert stats.exit_code == 0
    assert "actuaciones=4" in stats.output
    assert "560,50€" in stats.output

    liquidacion = runner.invoke(args=["oficio-liquidacion", "--anio", "2026", "--trimestre", "Q1"])
    assert liquidacion.exit_code == 0
    assert "total=560,50€ actuaciones=4" in liquidacion.output

    seed = runner.invoke(args=["seed-demo"])
    assert seed.exit_code == 0
    assert "Seed skipped" in seed.output


def test_malformed_payloads_return_400(client):
    bad_date = client.post(
        "/turnos",
        json={
            "tipo": "penal",
            "partido_judicial": "Madrid",
            "fecha_inicio": 20260224,
            "fecha_fin": "2026-02-28",
            "abogado_id": "ABG-001",
            "abogado_nombre": "María González",
        },
    )
    assert bad_date.status_code == 400
    assert "fecha_inicio" in bad_date.get_json()["error"]

    bad_importe = client.post(
        "/actuaciones",
        json={
            "turno_id": "TURNO-001",
            "tipo_actuacion": "detenido",
            "juzgado": "Juzgado de Guardia Madrid",
            "numero_procedimiento": "0000111/2026",
            "fecha": "2026-02-26",
            "hora_inicio": "10:00",
            "hora_fin": "11:00",
            "importe": "NaN",
        },
    )
    assert bad_importe.status_code == 400
    assert len(client.get("/actuaciones").get_json()) == 4


def test_unknown_filters_and_communities(client):
    response = client.get("/turnos?tipo=laboral")
    assert response.status_code == 200
    assert response.get_json() == []

    murcia = client.get("/oficio/liquidacion?anio=2026&trimestre=Q1&comunidad=Murcia")
    assert murcia.status_code == 400
    assert "Baremo no encontrado" in murcia.get_json()["error"]
    assert client.get("/oficio/liquidacion.csv?anio=2026&trimestre=Q1&comunidad=Murcia").status_code == 400


def test_demo_seed_leaves_file_databases_to_migrations(tmp_path):
    class FileConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'roster.db'}"
        OFICIO_SEED_DEMO = True

    app = create_app(FileConfig)
    with app.app_context():
        assert not sa.inspect(db.engine).has_table("turno")
        db.engine.dispose()
