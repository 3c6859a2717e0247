from __future__ import annotations

from datetime import date
from decimal import Decimal

CENT = Decimal("0.01")
MINUTES_PER_DAY = 24 * 60


def money(value: Decimal | float | int) -> str:
    return f"{Decimal(value):.2f}€".replace(".", ",")


def quantize_cents(value: Decimal | float | int | str) -> Decimal:
    return Decimal(str(value)).quantize(CENT)


def parse_hora(value: str) -> int:
    """Return minutes since midnight for an ``HH:MM`` string."""
    raw = (value or "").strip()
    hours, sep, minutes = raw.partition(":")
    if not sep or not hours.isdigit() or not minutes.isdigit() or len(minutes) != 2:
        raise ValueError(f"Hora invalida: {raw or '(vacia)'}")
    hh, mm = int(hours), int(minutes)
    if hh > 23 or mm > 59:
        raise ValueError(f"Hora invalida: {raw}")
    return hh * 60 + mm


def duracion_minutos(hora_inicio: str, hora_fin: str) -> int:
    # An end before the start crosses midnight.
    start = parse_hora(hora_inicio)
    end = parse_hora(hora_fin)
    if end < start:
        end += MINUTES_PER_DAY
    return end - start


def minutos_a_horas(minutes: int) -> Decimal:
    return (Decimal(minutes) / Decimal(60)).quantize(CENT)


def first_day_of_month(today: date) -> date:
    return today.replace(day=1)
