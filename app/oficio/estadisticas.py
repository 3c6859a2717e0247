from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from app.core.utils import duracion_minutos, first_day_of_month, minutos_a_horas, quantize_cents
from app.oficio.records import ActuacionRecord, TurnoRecord

MESES = ("Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic")
TOP_N = 5
# Placeholder ratio used to show what the same work would bill privately.
RATIO_PRIVADO = Decimal("2.3")


@dataclass
class EstadisticasOficio:
    total_actuaciones: int = 0
    actuaciones_este_mes: int = 0
    ingresos_oficio: Decimal = Decimal("0.00")
    horas_dedicadas: Decimal = Decimal("0.00")
    actuaciones_por_tipo: dict[str, int] = field(default_factory=dict)
    actuaciones_por_abogado: dict[str, int] = field(default_factory=dict)
    actuaciones_por_mes: dict[str, int] = field(default_factory=dict)
    ingresos_por_mes: dict[str, Decimal] = field(default_factory=dict)
    horas_por_mes: dict[str, Decimal] = field(default_factory=dict)
    tipos_delito_mas_frecuentes: list[tuple[str, int]] = field(default_factory=list)
    juzgados_mas_activos: list[tuple[str, int]] = field(default_factory=list)
    comparacion_ingresos: dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "total_actuaciones": self.total_actuaciones,
            "actuaciones_este_mes": self.actuaciones_este_mes,
            "ingresos_oficio": f"{self.ingresos_oficio:.2f}",
            "horas_dedicadas": float(self.horas_dedicadas),
            "actuaciones_por_tipo": dict(self.actuaciones_por_tipo),
            "actuaciones_por_abogado": dict(self.actuaciones_por_abogado),
            "actuaciones_por_mes": [
                {"mes": mes, "cantidad": cantidad} for mes, cantidad in self.actuaciones_por_mes.items()
            ],
            "ingresos_por_mes": [
                {"mes": mes, "importe": f"{importe:.2f}"} for mes, importe in self.ingresos_por_mes.items()
            ],
            "horas_por_mes": [{"mes": mes, "horas": float(horas)} for mes, horas in self.horas_por_mes.items()],
            "tipos_delito_mas_frecuentes": [
                {"delito": delito, "cantidad": cantidad} for delito, cantidad in self.tipos_delito_mas_frecuentes
            ],
            "juzgados_mas_activos": [
                {"juzgado": juzgado, "cantidad": cantidad} for juzgado, cantidad in self.juzgados_mas_activos
            ],
            "comparacion_ingresos": {k: f"{v:.2f}" for k, v in self.comparacion_ingresos.items()},
        }


def mes_de(fecha: date) -> str:
    return MESES[fecha.month - 1]


def calcular_estadisticas(
    actuaciones: Iterable[ActuacionRecord],
    turnos: Iterable[TurnoRecord],
    hoy: date,
) -> EstadisticasOficio:
    """Aggregate every actuación into counts, revenue and hours.

    ``actuaciones`` should come in creation order so that ties in the top-5
    rankings keep the first-seen entry ahead. Lawyer counts go through the
    actuación's turno; actuaciones whose turno is unknown are left out of
    that breakdown only.
    """
    abogado_por_turno = {turno.id: turno.abogado_nombre for turno in turnos}
    inicio_mes = first_day_of_month(hoy)

    total = 0
    este_mes = 0
    ingresos = Decimal("0")
    minutos = 0
    por_tipo: Counter[str] = Counter()
    por_abogado: Counter[str] = Counter()
    delitos: Counter[str] = Counter()
    juzgados: Counter[str] = Counter()
    cantidad_mes = {mes: 0 for mes in MESES}
    ingresos_mes = {mes: Decimal("0") for mes in MESES}
    minutos_mes = {mes: 0 for mes in MESES}

    for actuacion in actuaciones:
        total += 1
        mes = mes_de(actuacion.fecha)
        if actuacion.fecha >= inicio_mes:
            este_mes += 1

        por_tipo[actuacion.tipo_actuacion.value] += 1
        abogado = abogado_por_turno.get(actuacion.turno_id)
        if abogado is not None:
            por_abogado[abogado] += 1

        if actuacion.importe:
            ingresos += actuacion.importe
            ingresos_mes[mes] += actuacion.importe

        duracion = duracion_minutos(actuacion.hora_inicio, actuacion.hora_fin)
        minutos += duracion
        minutos_mes[mes] += duracion
        cantidad_mes[mes] += 1

        if actuacion.delito:
            delitos[actuacion.delito] += 1
        juzgados[actuacion.juzgado] += 1

    ingresos_oficio = quantize_cents(ingresos)
    return EstadisticasOficio(
        total_actuaciones=total,
        actuaciones_este_mes=este_mes,
        ingresos_oficio=ingresos_oficio,
        horas_dedicadas=minutos_a_horas(minutos),
        actuaciones_por_tipo=dict(por_tipo),
        actuaciones_por_abogado=dict(por_abogado),
        actuaciones_por_mes=cantidad_mes,
        ingresos_por_mes={mes: quantize_cents(valor) for mes, valor in ingresos_mes.items()},
        horas_por_mes={mes: minutos_a_horas(valor) for mes, valor in minutos_mes.items()},
        tipos_delito_mas_frecuentes=delitos.most_common(TOP_N),
        juzgados_mas_activos=juzgados.most_common(TOP_N),
        comparacion_ingresos={
            "oficio": ingresos_oficio,
            "privado": quantize_cents(ingresos * RATIO_PRIVADO),
        },
    )
