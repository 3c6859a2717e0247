"""Immutable snapshots of roster rows.

The service layer never hands out ORM instances: every read copies the row
into one of these frozen dataclasses, so callers cannot change the store
through a returned value.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from app.core.models import (
    AbogadoOficio,
    ActuacionOficio,
    ConfiguracionTurnos,
    EstadoTurno,
    FrecuenciaRotacion,
    Guardia,
    PartidoJudicial,
    TipoActuacion,
    TipoGuardia,
    TipoTurno,
    Turno,
)


@dataclass(frozen=True)
class TurnoRecord:
    id: str
    tipo: TipoTurno
    partido_judicial: str
    fecha_inicio: date
    fecha_fin: date
    abogado_id: str
    abogado_nombre: str
    estado: EstadoTurno
    observaciones: str | None = None

    @classmethod
    def from_model(cls, turno: Turno) -> TurnoRecord:
        return cls(
            id=turno.id,
            tipo=turno.tipo,
            partido_judicial=turno.partido_judicial,
            fecha_inicio=turno.fecha_inicio,
            fecha_fin=turno.fecha_fin,
            abogado_id=turno.abogado_id,
            abogado_nombre=turno.abogado_nombre,
            estado=turno.estado,
            observaciones=turno.observaciones,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "tipo": self.tipo.value,
            "partido_judicial": self.partido_judicial,
            "fecha_inicio": self.fecha_inicio.isoformat(),
            "fecha_fin": self.fecha_fin.isoformat(),
            "abogado_id": self.abogado_id,
            "abogado_nombre": self.abogado_nombre,
            "estado": self.estado.value,
            "observaciones": self.observaciones,
        }


@dataclass(frozen=True)
class GuardiaRecord:
    id: str
    turno_id: str
    fecha: date
    hora_inicio: str
    hora_fin: str
    tipo: TipoGuardia
    confirmada: bool

    @classmethod
    def from_model(cls, guardia: Guardia) -> GuardiaRecord:
        return cls(
            id=guardia.id,
            turno_id=guardia.turno_id,
            fecha=guardia.fecha,
            hora_inicio=guardia.hora_inicio,
            hora_fin=guardia.hora_fin,
            tipo=guardia.tipo,
            confirmada=guardia.confirmada,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "turno_id": self.turno_id,
            "fecha": self.fecha.isoformat(),
            "hora_inicio": self.hora_inicio,
            "hora_fin": self.hora_fin,
            "tipo": self.tipo.value,
            "confirmada": self.confirmada,
        }


@dataclass(frozen=True)
class ActuacionRecord:
    id: str
    turno_id: str
    tipo_actuacion: TipoActuacion
    juzgado: str
    numero_procedimiento: str
    fecha: date
    hora_inicio: str
    hora_fin: str
    resultado: str
    facturada: bool
    expediente_id: str | None = None
    detenido_nombre: str | None = None
    delito: str | None = None
    observaciones: str | None = None
    importe: Decimal | None = None

    @classmethod
    def from_model(cls, actuacion: ActuacionOficio) -> ActuacionRecord:
        return cls(
            id=actuacion.id,
            turno_id=actuacion.turno_id,
            tipo_actuacion=actuacion.tipo_actuacion,
            juzgado=actuacion.juzgado,
            numero_procedimiento=actuacion.numero_procedimiento,
            fecha=actuacion.fecha,
            hora_inicio=actuacion.hora_inicio,
            hora_fin=actuacion.hora_fin,
            resultado=actuacion.resultado,
            facturada=actuacion.facturada,
            expediente_id=actuacion.expediente_id,
            detenido_nombre=actuacion.detenido_nombre,
            delito=actuacion.delito,
            observaciones=actuacion.observaciones,
            importe=Decimal(actuacion.importe) if actuacion.importe is not None else None,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "turno_id": self.turno_id,
            "expediente_id": self.expediente_id,
            "tipo_actuacion": self.tipo_actuacion.value,
            "juzgado": self.juzgado,
            "numero_procedimiento": self.numero_procedimiento,
            "fecha": self.fecha.isoformat(),
            "hora_inicio": self.hora_inicio,
            "hora_fin": self.hora_fin,
            "detenido_nombre": self.detenido_nombre,
            "delito": self.delito,
            "resultado": self.resultado,
            "observaciones": self.observaciones,
            "importe": f"{self.importe:.2f}" if self.importe is not None else None,
            "facturada": self.facturada,
        }


@dataclass(frozen=True)
class AbogadoRecord:
    id: str
    nombre: str
    numero_colegiado: str
    turnos_inscritos: tuple[TipoTurno, ...]
    disponibilidad: bool

    @classmethod
    def from_model(cls, abogado: AbogadoOficio) -> AbogadoRecord:
        return cls(
            id=abogado.id,
            nombre=abogado.nombre,
            numero_colegiado=abogado.numero_colegiado,
            turnos_inscritos=tuple(TipoTurno(t) for t in abogado.turnos_inscritos or []),
            disponibilidad=abogado.disponibilidad,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "nombre": self.nombre,
            "numero_colegiado": self.numero_colegiado,
            "turnos_inscritos": [t.value for t in self.turnos_inscritos],
            "disponibilidad": self.disponibilidad,
        }


@dataclass(frozen=True)
class PartidoRecord:
    id: str
    nombre: str
    provincia: str
    turnos_disponibles: tuple[TipoTurno, ...]

    @classmethod
    def from_model(cls, partido: PartidoJudicial) -> PartidoRecord:
        return cls(
            id=partido.id,
            nombre=partido.nombre,
            provincia=partido.provincia,
            turnos_disponibles=tuple(TipoTurno(t) for t in partido.turnos_disponibles or []),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "nombre": self.nombre,
            "provincia": self.provincia,
            "turnos_disponibles": [t.value for t in self.turnos_disponibles],
        }


@dataclass(frozen=True)
class ConfiguracionRecord:
    partido_judicial: str
    rotacion_automatica: bool
    frecuencia_rotacion: FrecuenciaRotacion
    incompatible_consecutivas: bool
    alerta_horas_antes: int

    @classmethod
    def from_model(cls, config: ConfiguracionTurnos) -> ConfiguracionRecord:
        return cls(
            partido_judicial=config.partido_judicial,
            rotacion_automatica=config.rotacion_automatica,
            frecuencia_rotacion=config.frecuencia_rotacion,
            incompatible_consecutivas=config.incompatible_consecutivas,
            alerta_horas_antes=config.alerta_horas_antes,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "partido_judicial": self.partido_judicial,
            "rotacion_automatica": self.rotacion_automatica,
            "frecuencia_rotacion": self.frecuencia_rotacion.value,
            "incompatible_consecutivas": self.incompatible_consecutivas,
            "alerta_horas_antes": self.alerta_horas_antes,
        }
