from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Iterable
import csv

from app.core.utils import quantize_cents
from app.oficio.records import ActuacionRecord, TurnoRecord


@dataclass(frozen=True)
class BaremoItem:
    id: str
    codigo: str
    descripcion: str
    tipo_actuacion: str
    importe: Decimal
    unidad: str  # actuacion | hora | dia

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "codigo": self.codigo,
            "descripcion": self.descripcion,
            "tipo_actuacion": self.tipo_actuacion,
            "importe": f"{self.importe:.2f}",
            "unidad": self.unidad,
        }


@dataclass(frozen=True)
class Baremo:
    comunidad: str
    anio: int
    items: tuple[BaremoItem, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "comunidad": self.comunidad,
            "anio": self.anio,
            "items": [item.to_dict() for item in self.items],
        }


# (codigo, tipo_actuacion, unidad, descripcion); the order matches the importes below.
CONCEPTOS: tuple[tuple[str, str, str, str], ...] = (
    ("A.1.1", "detenido", "actuacion", "Asistencia a detenido"),
    ("A.1.2", "declaracion", "actuacion", "Declaración de detenido"),
    ("A.1.3", "juicio_rapido", "actuacion", "Asistencia a juicio rápido"),
    ("A.1.4", "orden_proteccion", "actuacion", "Orden de protección"),
    ("A.1.5", "reconocimiento", "actuacion", "Reconocimiento de testigo"),
    ("A.1.6", "recursos", "actuacion", "Recursos de apelación"),
    ("A.2.1", "guardia", "dia", "Guardia presencial (8h)"),
    ("A.2.2", "guardia", "dia", "Guardia localizable (24h)"),
    ("B.1.1", "asistencia_civil", "actuacion", "Asistencia en procedimiento civil"),
    ("B.1.2", "juicio_civil", "actuacion", "Representación en juicio"),
    ("C.1.1", "extranjeria", "actuacion", "Asistencia a extranjero en retención"),
    ("C.1.2", "extranjeria", "actuacion", "Recurso contra deportación"),
    ("D.1.1", "violencia_genero", "actuacion", "Asistencia a víctima de VG"),
    ("D.1.2", "violencia_genero", "actuacion", "Seguimiento caso VG"),
    ("E.1.1", "menores", "actuacion", "Asistencia a menor"),
    ("E.1.2", "menores", "actuacion", "Declaración de menor"),
)

IMPORTES_POR_COMUNIDAD: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    (
        "Comunidad de Madrid",
        "BM",
        ("150.50", "120.75", "200.00", "120.75", "89.25", "180.50", "250.00", "180.00",
         "95.25", "175.50", "165.00", "210.75", "145.25", "85.00", "175.50", "145.25"),
    ),
    (
        "Andalucía",
        "BA",
        ("145.00", "115.50", "190.00", "115.50", "85.75", "175.00", "240.00", "175.00",
         "90.25", "170.00", "160.00", "205.00", "140.00", "80.00", "170.00", "140.00"),
    ),
    (
        "Cataluña",
        "BC",
        ("160.00", "130.25", "215.00", "130.25", "95.00", "195.00", "265.00", "190.00",
         "100.00", "185.00", "175.00", "220.00", "155.00", "90.00", "185.00", "155.00"),
    ),
    (
        "Comunidad Valenciana",
        "BV",
        ("152.00", "122.00", "205.00", "122.00", "90.00", "182.00", "255.00", "185.00",
         "96.00", "178.00", "168.00", "215.00", "148.00", "86.00", "178.00", "148.00"),
    ),
    (
        "Galicia",
        "BG",
        ("140.00", "110.00", "185.00", "110.00", "80.00", "170.00", "230.00", "165.00",
         "85.00", "165.00", "155.00", "200.00", "135.00", "75.00", "165.00", "135.00"),
    ),
    (
        "País Vasco",
        "BP",
        ("165.00", "135.00", "220.00", "135.00", "100.00", "200.00", "275.00", "200.00",
         "105.00", "190.00", "180.00", "230.00", "160.00", "95.00", "190.00", "160.00"),
    ),
    (
        "Castilla y León",
        "BCL",
        ("138.00", "108.00", "182.00", "108.00", "78.00", "168.00", "225.00", "160.00",
         "82.00", "162.00", "152.00", "195.00", "132.00", "72.00", "162.00", "132.00"),
    ),
)

ANIO_BAREMOS = 2026


def _build_baremos() -> tuple[Baremo, ...]:
    baremos = []
    for comunidad, prefijo, importes in IMPORTES_POR_COMUNIDAD:
        items = tuple(
            BaremoItem(
                id=f"{prefijo}-{idx:03d}",
                codigo=codigo,
                descripcion=descripcion,
                tipo_actuacion=tipo,
                importe=Decimal(importe),
                unidad=unidad,
            )
            for idx, ((codigo, tipo, unidad, descripcion), importe) in enumerate(zip(CONCEPTOS, importes), start=1)
        )
        baremos.append(Baremo(comunidad=comunidad, anio=ANIO_BAREMOS, items=items))
    return tuple(baremos)


BAREMOS: tuple[Baremo, ...] = _build_baremos()


def get_baremo(comunidad: str) -> Baremo | None:
    needle = (comunidad or "").strip().lower()
    if not needle:
        return None
    for baremo in BAREMOS:
        if needle in baremo.comunidad.lower():
            return baremo
    return None


def calcular_importe(tipo_actuacion: str, comunidad: str = "Madrid") -> Decimal:
    baremo = get_baremo(comunidad)
    if baremo is None:
        return Decimal("0.00")
    for item in baremo.items:
        if item.tipo_actuacion == tipo_actuacion:
            return item.importe
    return Decimal("0.00")


TRIMESTRES: dict[str, tuple[tuple[int, int], tuple[int, int]]] = {
    "Q1": ((1, 1), (3, 31)),
    "Q2": ((4, 1), (6, 30)),
    "Q3": ((7, 1), (9, 30)),
    "Q4": ((10, 1), (12, 31)),
}


def rango_trimestre(anio: int, trimestre: str) -> tuple[date, date]:
    key = (trimestre or "").strip().upper()
    if key not in TRIMESTRES:
        raise ValueError(f"Trimestre invalido: {trimestre}")
    (m1, d1), (m2, d2) = TRIMESTRES[key]
    return date(anio, m1, d1), date(anio, m2, d2)


def trimestre_de(fecha: date) -> str:
    return f"Q{(fecha.month - 1) // 3 + 1}"


@dataclass
class LineaLiquidacion:
    tipo_actuacion: str
    cantidad: int = 0
    importe: Decimal = Decimal("0.00")


@dataclass
class Liquidacion:
    anio: int
    trimestre: str
    comunidad: str
    desde: date
    hasta: date
    actuaciones: list[ActuacionRecord] = field(default_factory=list)
    lineas: dict[str, LineaLiquidacion] = field(default_factory=dict)
    importes: dict[str, Decimal] = field(default_factory=dict)

    @property
    def total_actuaciones(self) -> int:
        return len(self.actuaciones)

    @property
    def importe_total(self) -> Decimal:
        return quantize_cents(sum((linea.importe for linea in self.lineas.values()), Decimal("0")))

    def to_dict(self) -> dict[str, object]:
        return {
            "anio": self.anio,
            "trimestre": self.trimestre,
            "comunidad": self.comunidad,
            "desde": self.desde.isoformat(),
            "hasta": self.hasta.isoformat(),
            "total_actuaciones": self.total_actuaciones,
            "importe_total": f"{self.importe_total:.2f}",
            "lineas": [
                {
                    "tipo_actuacion": linea.tipo_actuacion,
                    "cantidad": linea.cantidad,
                    "importe": f"{linea.importe:.2f}",
                }
                for linea in self.lineas.values()
            ],
            "actuaciones": [
                {**actuacion.to_dict(), "importe_liquidado": f"{self.importes[actuacion.id]:.2f}"}
                for actuacion in self.actuaciones
            ],
        }


def liquidacion_trimestral(
    actuaciones: Iterable[ActuacionRecord],
    anio: int,
    trimestre: str,
    comunidad: str,
    tipo_actuacion: str | None = None,
) -> Liquidacion:
    """Settle a quarter's actuaciones against a community's baremo.

    Each actuación is paid at the baremo rate for its type; types without a
    baremo entry fall back to the amount recorded on the actuación itself.
    """
    desde, hasta = rango_trimestre(anio, trimestre)
    baremo = get_baremo(comunidad)
    if baremo is None:
        raise ValueError(f"Baremo no encontrado: {comunidad}")
    liquidacion = Liquidacion(
        anio=anio,
        trimestre=trimestre.strip().upper(),
        comunidad=baremo.comunidad,
        desde=desde,
        hasta=hasta,
    )
    for actuacion in actuaciones:
        if not desde <= actuacion.fecha <= hasta:
            continue
        tipo = actuacion.tipo_actuacion.value
        if tipo_actuacion and tipo != tipo_actuacion:
            continue
        importe = calcular_importe(tipo, baremo.comunidad) or actuacion.importe or Decimal("0.00")
        linea = liquidacion.lineas.setdefault(tipo, LineaLiquidacion(tipo_actuacion=tipo))
        linea.cantidad += 1
        linea.importe = quantize_cents(linea.importe + importe)
        liquidacion.importes[actuacion.id] = quantize_cents(importe)
        liquidacion.actuaciones.append(actuacion)
    return liquidacion


def liquidacion_csv(liquidacion: Liquidacion, turnos: Iterable[TurnoRecord]) -> bytes:
    abogados = {turno.id: turno.abogado_nombre for turno in turnos}
    headers = [
        "id",
        "fecha",
        "tipo_actuacion",
        "juzgado",
        "numero_procedimiento",
        "turno_id",
        "abogado",
        "importe",
    ]
    stream = StringIO()
    writer = csv.DictWriter(stream, fieldnames=headers)
    writer.writeheader()
    for actuacion in liquidacion.actuaciones:
        writer.writerow(
            {
                "id": actuacion.id,
                "fecha": actuacion.fecha.isoformat(),
                "tipo_actuacion": actuacion.tipo_actuacion.value,
                "juzgado": actuacion.juzgado,
                "numero_procedimiento": actuacion.numero_procedimiento,
                "turno_id": actuacion.turno_id,
                "abogado": abogados.get(actuacion.turno_id, ""),
                "importe": f"{liquidacion.importes[actuacion.id]:.2f}",
            }
        )
    return stream.getvalue().encode("utf-8")
