from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from app.core.models import EstadoTurno, TipoActuacion, TipoTurno
from app.core.utils import duracion_minutos, minutos_a_horas, parse_hora
from app.oficio.estadisticas import MESES, calcular_estadisticas
from app.oficio.records import ActuacionRecord, TurnoRecord


def _turno(turno_id: str, abogado: str) -> TurnoRecord:
    return TurnoRecord(
        id=turno_id,
        tipo=TipoTurno.PENAL,
        partido_judicial="Madrid",
        fecha_inicio=date(2026, 2, 1),
        fecha_fin=date(2026, 2, 28),
        abogado_id=f"ABG-{abogado[:3].upper()}",
        abogado_nombre=abogado,
        estado=EstadoTurno.ASIGNADO,
    )


def _actuacion(numero: int, **overrides) -> ActuacionRecord:
    fields = {
        "id": f"ACT-OF-{numero:03d}",
        "turno_id": "TURNO-001",
        "tipo_actuacion": TipoActuacion.DETENIDO,
        "juzgado": "Juzgado de Guardia Madrid",
        "numero_procedimiento": f"{numero:07d}/2026",
        "fecha": date(2026, 2, 20),
        "hora_inicio": "10:00",
        "hora_fin": "11:00",
        "resultado": "",
        "facturada": False,
        "importe": Decimal("100.00"),
    }
    fields.update(overrides)
    return ActuacionRecord(**fields)


def test_parse_hora_rejects_malformed_values():
    assert parse_hora("00:00") == 0
    assert parse_hora("23:59") == 23 * 60 + 59
    for raw in ("", "8", "24:00", "12:60", "aa:bb", "12:5"):
        with pytest.raises(ValueError, match="Hora invalida"):
            parse_hora(raw)


def test_durations_cross_midnight():
    assert duracion_minutos("10:30", "12:45") == 135
    assert duracion_minutos("22:00", "02:00") == 240
    assert duracion_minutos("20:00", "08:00") == 12 * 60
    assert duracion_minutos("09:00", "09:00") == 0
    assert minutos_a_horas(135) == Decimal("2.25")


def test_single_actuacion_hours_and_revenue():
    stats = calcular_estadisticas(
        [_actuacion(1, hora_inicio="10:30", hora_fin="12:45", importe=Decimal("150.50"))],
        [_turno("TURNO-001", "María González")],
        date(2026, 2, 25),
    )

    assert stats.horas_dedicadas == Decimal("2.25")
    assert stats.ingresos_oficio == Decimal("150.50")
    assert stats.horas_por_mes["Feb"] == Decimal("2.25")


def test_overnight_actuacion_counts_four_hours():
    stats = calcular_estadisticas(
        [_actuacion(1, hora_inicio="22:00", hora_fin="02:00")],
        [],
        date(2026, 2, 25),
    )
    assert stats.horas_dedicadas == Decimal("4.00")


def test_missing_importe_adds_nothing():
    stats = calcular_estadisticas(
        [_actuacion(1, importe=None), _actuacion(2, importe=Decimal("0.10")), _actuacion(3, importe=Decimal("0.20"))],
        [],
        date(2026, 2, 25),
    )
    assert stats.ingresos_oficio == Decimal("0.30")
    assert stats.comparacion_ingresos["privado"] == Decimal("0.69")


def test_monthly_breakdown_partitions_totals():
    actuaciones = [
        _actuacion(1, fecha=date(2026, 1, 5), importe=Decimal("10.10")),
        _actuacion(2, fecha=date(2026, 1, 28), importe=Decimal("20.20")),
        _actuacion(3, fecha=date(2025, 2, 14), importe=Decimal("30.30")),
        _actuacion(4, fecha=date(2026, 12, 31), importe=Decimal("40.40")),
    ]

    stats = calcular_estadisticas(actuaciones, [], date(2026, 12, 31))

    assert list(stats.actuaciones_por_mes) == list(MESES)
    assert sum(stats.actuaciones_por_mes.values()) == stats.total_actuaciones == 4
    assert sum(stats.ingresos_por_mes.values()) == stats.ingresos_oficio == Decimal("101.00")
    # Months from different years share a bucket.
    assert stats.actuaciones_por_mes["Feb"] == 1
    assert stats.actuaciones_por_mes["Ene"] == 2
    assert stats.ingresos_por_mes["Dic"] == Decimal("40.40")
    assert stats.actuaciones_este_mes == 1


def test_este_mes_counts_from_first_day_of_month():
    actuaciones = [
        _actuacion(1, fecha=date(2026, 2, 28)),
        _actuacion(2, fecha=date(2026, 3, 1)),
        _actuacion(3, fecha=date(2026, 3, 20)),
    ]
    stats = calcular_estadisticas(actuaciones, [], date(2026, 3, 15))
    assert stats.actuaciones_este_mes == 2


def test_lawyer_breakdown_goes_through_the_turno():
    turnos = [_turno("TURNO-001", "María González"), _turno("TURNO-002", "Carlos Ruiz")]
    actuaciones = [
        _actuacion(1),
        _actuacion(2, turno_id="TURNO-002"),
        _actuacion(3),
        _actuacion(4, turno_id="TURNO-404"),
    ]

    stats = calcular_estadisticas(actuaciones, turnos, date(2026, 2, 25))

    assert stats.actuaciones_por_abogado == {"María González": 2, "Carlos Ruiz": 1}
    assert stats.total_actuaciones == 4


def test_top_five_rankings_keep_first_seen_on_ties():
    juzgados = ["J-A", "J-B", "J-C", "J-D", "J-E", "J-F", "J-B"]
    actuaciones = [
        _actuacion(i, juzgado=juzgado, delito=None if i == 0 else f"Delito {i % 3}")
        for i, juzgado in enumerate(juzgados)
    ]

    stats = calcular_estadisticas(actuaciones, [], date(2026, 2, 25))

    assert stats.juzgados_mas_activos == [("J-B", 2), ("J-A", 1), ("J-C", 1), ("J-D", 1), ("J-E", 1)]
    assert stats.tipos_delito_mas_frecuentes == [("Delito 1", 2), ("Delito 2", 2), ("Delito 0", 2)]


def test_empty_roster_gives_zeroes():
    stats = calcular_estadisticas([], [], date(2026, 2, 25))
    assert stats.total_actuaciones == 0
    assert stats.ingresos_oficio == Decimal("0.00")
    assert stats.horas_dedicadas == Decimal("0.00")
    assert stats.tipos_delito_mas_frecuentes == []
    assert all(v == 0 for v in stats.actuaciones_por_mes.values())


def test_seeded_roster_statistics(service):
    stats = service.estadisticas(date(2026, 2, 25))

    assert stats.total_actuaciones == 4
    assert stats.actuaciones_este_mes == 4
    assert stats.ingresos_oficio == Decimal("560.50")
    assert stats.horas_dedicadas == Decimal("6.50")
    assert stats.actuaciones_por_tipo == {
        "detenido": 1,
        "orden_proteccion": 1,
        "asistencia_detencion": 1,
        "juicio_rapido": 1,
    }
    assert stats.actuaciones_por_abogado == {"María González": 3, "Carlos Ruiz": 1}
    assert stats.actuaciones_por_mes["Feb"] == 4
    assert stats.ingresos_por_mes["Feb"] == Decimal("560.50")
    assert [d for d, _ in stats.tipos_delito_mas_frecuentes] == [
        "Robo con violencia",
        "Malos tratos",
        "Conducción bajo efectos del alcohol",
    ]
    assert stats.juzgados_mas_activos[0] == ("Juzgado de Guardia Madrid", 1)
    assert stats.comparacion_ingresos == {"oficio": Decimal("560.50"), "privado": Decimal("1289.15")}


def test_statistics_follow_new_actuaciones(service):
    service.crear_actuacion(
        {
            "turno_id": "TURNO-003",
            "tipo_actuacion": "otro",
            "juzgado": "Juzgado de Guardia Madrid",
            "numero_procedimiento": "0000999/2026",
            "fecha": "2026-03-02",
            "hora_inicio": "23:30",
            "hora_fin": "00:15",
        }
    )

    stats = service.estadisticas(date(2026, 3, 10))

    assert stats.total_actuaciones == 5
    assert stats.actuaciones_este_mes == 1
    assert stats.ingresos_oficio == Decimal("560.50")
    assert stats.horas_por_mes["Mar"] == Decimal("0.75")
    assert stats.actuaciones_por_abogado["Ana López"] == 1
    assert stats.juzgados_mas_activos[0] == ("Juzgado de Guardia Madrid", 2)
