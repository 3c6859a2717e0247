from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, Enum as SAEnum, ForeignKey, Index, select
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.core.extensions import db
from app.core.utils import parse_hora


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TipoTurno(str, Enum):
    PENAL = "penal"
    CIVIL = "civil"
    EXTRANJERIA = "extranjeria"
    VIOLENCIA_GENERO = "violencia_genero"
    MENORES = "menores"


class EstadoTurno(str, Enum):
    ASIGNADO = "asignado"
    CONFIRMADO = "confirmado"
    COMPLETADO = "completado"
    CANCELADO = "cancelado"


class TipoGuardia(str, Enum):
    PRESENCIAL = "presencial"
    LOCALIZABLE = "localizable"


class TipoActuacion(str, Enum):
    DETENIDO = "detenido"
    DECLARACION = "declaracion"
    JUICIO_RAPIDO = "juicio_rapido"
    ORDEN_PROTECCION = "orden_proteccion"
    ASISTENCIA_DETENCION = "asistencia_detencion"
    RECONOCIMIENTO = "reconocimiento"
    RECURSOS = "recursos"
    OTRO = "otro"


class FrecuenciaRotacion(str, Enum):
    SEMANAL = "semanal"
    QUINCENAL = "quincenal"
    MENSUAL = "mensual"


ESTADOS_CERRADOS = frozenset({EstadoTurno.COMPLETADO, EstadoTurno.CANCELADO})


class Secuencia(db.Model):
    # Monotonic counter per id prefix (TURNO, GUARD, ACT-OF, ...)
    __tablename__ = "secuencia"

    prefijo: Mapped[str] = mapped_column(db.String(20), primary_key=True)
    ultimo: Mapped[int] = mapped_column(nullable=False, default=0)

    @classmethod
    def siguiente(cls, session, prefijo: str) -> int:
        row = session.get(cls, prefijo)
        if row is None:
            row = cls(prefijo=prefijo, ultimo=0)
            session.add(row)
        row.ultimo = (row.ultimo or 0) + 1
        session.flush()
        return row.ultimo


def codigo(prefijo: str, numero: int) -> str:
    return f"{prefijo}-{numero:03d}"


class PartidoJudicial(db.Model):
    __tablename__ = "partido_judicial"

    id: Mapped[str] = mapped_column(db.String(20), primary_key=True)
    numero: Mapped[int] = mapped_column(nullable=False, unique=True)
    nombre: Mapped[str] = mapped_column(db.String(120), unique=True, nullable=False)
    provincia: Mapped[str] = mapped_column(db.String(120), nullable=False, default="")
    turnos_disponibles: Mapped[list[str]] = mapped_column(db.JSON, nullable=False, default=list)


class AbogadoOficio(db.Model):
    __tablename__ = "abogado_oficio"

    id: Mapped[str] = mapped_column(db.String(20), primary_key=True)
    numero: Mapped[int] = mapped_column(nullable=False, unique=True)
    nombre: Mapped[str] = mapped_column(db.String(160), nullable=False)
    numero_colegiado: Mapped[str] = mapped_column(db.String(30), unique=True, nullable=False)
    turnos_inscritos: Mapped[list[str]] = mapped_column(db.JSON, nullable=False, default=list)
    disponibilidad: Mapped[bool] = mapped_column(default=True, nullable=False)


class Turno(db.Model):
    __tablename__ = "turno"
    __table_args__ = (
        CheckConstraint("fecha_fin >= fecha_inicio", name="ck_turno_fechas"),
        Index("ix_turno_fechas", "fecha_inicio", "fecha_fin"),
    )

    id: Mapped[str] = mapped_column(db.String(20), primary_key=True)
    numero: Mapped[int] = mapped_column(nullable=False, unique=True)
    tipo: Mapped[TipoTurno] = mapped_column(SAEnum(TipoTurno, name="tipo_turno"), nullable=False)
    partido_judicial: Mapped[str] = mapped_column(db.String(120), nullable=False)
    fecha_inicio: Mapped[date] = mapped_column(nullable=False)
    fecha_fin: Mapped[date] = mapped_column(nullable=False)
    abogado_id: Mapped[str] = mapped_column(db.String(20), nullable=False, index=True)
    abogado_nombre: Mapped[str] = mapped_column(db.String(160), nullable=False)
    estado: Mapped[EstadoTurno] = mapped_column(
        SAEnum(EstadoTurno, name="estado_turno"),
        nullable=False,
        default=EstadoTurno.ASIGNADO,
    )
    observaciones: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    guardias = relationship("Guardia", back_populates="turno")
    actuaciones = relationship("ActuacionOficio", back_populates="turno")

    def cubre(self, fecha: date) -> bool:
        return self.fecha_inicio <= fecha <= self.fecha_fin


class Guardia(db.Model):
    __tablename__ = "guardia"

    id: Mapped[str] = mapped_column(db.String(20), primary_key=True)
    numero: Mapped[int] = mapped_column(nullable=False, unique=True)
    turno_id: Mapped[str] = mapped_column(ForeignKey("turno.id"), nullable=False, index=True)
    fecha: Mapped[date] = mapped_column(nullable=False)
    hora_inicio: Mapped[str] = mapped_column(db.String(5), nullable=False)
    hora_fin: Mapped[str] = mapped_column(db.String(5), nullable=False)
    tipo: Mapped[TipoGuardia] = mapped_column(SAEnum(TipoGuardia, name="tipo_guardia"), nullable=False)
    confirmada: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    turno = relationship("Turno", back_populates="guardias")

    @validates("hora_inicio", "hora_fin")
    def validate_hora(self, _key, value):
        parse_hora(value)
        return value.strip()


class ActuacionOficio(db.Model):
    __tablename__ = "actuacion_oficio"
    __table_args__ = (CheckConstraint("importe IS NULL OR importe >= 0", name="ck_actuacion_importe"),)

    id: Mapped[str] = mapped_column(db.String(20), primary_key=True)
    numero: Mapped[int] = mapped_column(nullable=False, unique=True)
    turno_id: Mapped[str] = mapped_column(ForeignKey("turno.id"), nullable=False, index=True)
    expediente_id: Mapped[str | None] = mapped_column(db.String(40), nullable=True)
    tipo_actuacion: Mapped[TipoActuacion] = mapped_column(
        SAEnum(TipoActuacion, name="tipo_actuacion"),
        nullable=False,
    )
    juzgado: Mapped[str] = mapped_column(db.String(200), nullable=False)
    numero_procedimiento: Mapped[str] = mapped_column(db.String(60), nullable=False)
    fecha: Mapped[date] = mapped_column(nullable=False, index=True)
    hora_inicio: Mapped[str] = mapped_column(db.String(5), nullable=False)
    hora_fin: Mapped[str] = mapped_column(db.String(5), nullable=False)
    detenido_nombre: Mapped[str | None] = mapped_column(db.String(160), nullable=True)
    delito: Mapped[str | None] = mapped_column(db.String(200), nullable=True)
    resultado: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    observaciones: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    importe: Mapped[Decimal | None] = mapped_column(db.Numeric(10, 2), nullable=True)
    facturada: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    turno = relationship("Turno", back_populates="actuaciones")

    @validates("hora_inicio", "hora_fin")
    def validate_hora(self, _key, value):
        parse_hora(value)
        return value.strip()


class ConfiguracionTurnos(db.Model):
    # Singleton row, always id=1
    __tablename__ = "configuracion_turnos"
    __table_args__ = (CheckConstraint("alerta_horas_antes >= 0", name="ck_config_alerta"),)

    id: Mapped[int] = mapped_column(primary_key=True, default=1)
    partido_judicial: Mapped[str] = mapped_column(db.String(120), nullable=False, default="Madrid")
    rotacion_automatica: Mapped[bool] = mapped_column(default=True, nullable=False)
    frecuencia_rotacion: Mapped[FrecuenciaRotacion] = mapped_column(
        SAEnum(FrecuenciaRotacion, name="frecuencia_rotacion"),
        nullable=False,
        default=FrecuenciaRotacion.SEMANAL,
    )
    incompatible_consecutivas: Mapped[bool] = mapped_column(default=True, nullable=False)
    alerta_horas_antes: Mapped[int] = mapped_column(nullable=False, default=24)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)


def _add_with_codigo(session, model, prefijo: str, **fields):
    numero = Secuencia.siguiente(session, prefijo)
    row = model(id=codigo(prefijo, numero), numero=numero, **fields)
    session.add(row)
    return row


def seed_demo_data(session) -> None:
    todos = [tipo.value for tipo in TipoTurno]
    for nombre, turnos in (
        ("Madrid", todos),
        ("Alcalá de Henares", ["penal", "civil", "extranjeria"]),
        ("Getafe", ["penal", "civil"]),
        ("Móstoles", ["penal", "civil", "violencia_genero"]),
    ):
        _add_with_codigo(session, PartidoJudicial, "PJ", nombre=nombre, provincia="Madrid", turnos_disponibles=turnos)

    for nombre, colegiado, turnos, disponible in (
        ("María González", "12345", ["penal", "violencia_genero"], True),
        ("Carlos Ruiz", "23456", ["civil", "extranjeria"], True),
        ("Ana López", "34567", ["extranjeria", "menores"], True),
        ("Pedro Sánchez", "45678", ["menores", "civil"], False),
        ("Laura Fernández", "56789", ["penal"], True),
    ):
        _add_with_codigo(
            session,
            AbogadoOficio,
            "ABG",
            nombre=nombre,
            numero_colegiado=colegiado,
            turnos_inscritos=turnos,
            disponibilidad=disponible,
        )

    for tipo, inicio, fin, abogado_id, abogado_nombre, estado in (
        (TipoTurno.PENAL, date(2026, 2, 24), date(2026, 2, 28), "ABG-001", "María González", EstadoTurno.CONFIRMADO),
        (TipoTurno.CIVIL, date(2026, 2, 24), date(2026, 2, 28), "ABG-002", "Carlos Ruiz", EstadoTurno.ASIGNADO),
        (TipoTurno.EXTRANJERIA, date(2026, 3, 1), date(2026, 3, 7), "ABG-003", "Ana López", EstadoTurno.ASIGNADO),
        (TipoTurno.VIOLENCIA_GENERO, date(2026, 3, 1), date(2026, 3, 7), "ABG-001", "María González", EstadoTurno.ASIGNADO),
        (TipoTurno.MENORES, date(2026, 3, 3), date(2026, 3, 7), "ABG-004", "Pedro Sánchez", EstadoTurno.ASIGNADO),
    ):
        _add_with_codigo(
            session,
            Turno,
            "TURNO",
            tipo=tipo,
            partido_judicial="Madrid",
            fecha_inicio=inicio,
            fecha_fin=fin,
            abogado_id=abogado_id,
            abogado_nombre=abogado_nombre,
            estado=estado,
        )
    session.flush()

    for turno_id, fecha, inicio, fin, tipo, confirmada in (
        ("TURNO-001", date(2026, 2, 24), "08:00", "20:00", TipoGuardia.PRESENCIAL, True),
        ("TURNO-001", date(2026, 2, 25), "20:00", "08:00", TipoGuardia.LOCALIZABLE, True),
        ("TURNO-002", date(2026, 2, 24), "09:00", "14:00", TipoGuardia.PRESENCIAL, False),
    ):
        _add_with_codigo(
            session,
            Guardia,
            "GUARD",
            turno_id=turno_id,
            fecha=fecha,
            hora_inicio=inicio,
            hora_fin=fin,
            tipo=tipo,
            confirmada=confirmada,
        )

    actuaciones = (
        {
            "turno_id": "TURNO-001",
            "tipo_actuacion": TipoActuacion.DETENIDO,
            "juzgado": "Juzgado de Guardia Madrid",
            "numero_procedimiento": "0001234/2026",
            "fecha": date(2026, 2, 20),
            "hora_inicio": "10:30",
            "hora_fin": "12:45",
            "detenido_nombre": "Juan Martínez Pérez",
            "delito": "Robo con violencia",
            "resultado": "Declaración prestada. Solicitud de habeas corpus denegada.",
            "importe": Decimal("150.50"),
            "facturada": True,
        },
        {
            "turno_id": "TURNO-001",
            "tipo_actuacion": TipoActuacion.ORDEN_PROTECCION,
            "juzgado": "Juzgado de Violencia de Género nº 1",
            "numero_procedimiento": "0005678/2026",
            "fecha": date(2026, 2, 19),
            "hora_inicio": "16:00",
            "hora_fin": "17:30",
            "detenido_nombre": "Carlos García",
            "delito": "Malos tratos",
            "resultado": "Orden de protección concedida.",
            "importe": Decimal("120.75"),
            "facturada": True,
        },
        {
            "turno_id": "TURNO-002",
            "tipo_actuacion": TipoActuacion.ASISTENCIA_DETENCION,
            "juzgado": "Comisaría del distrito Centro",
            "numero_procedimiento": "0009012/2026",
            "fecha": date(2026, 2, 21),
            "hora_inicio": "22:00",
            "hora_fin": "23:15",
            "detenido_nombre": "Miguel Torres",
            "delito": "Conducción bajo efectos del alcohol",
            "resultado": "Declaración prestada.",
            "importe": Decimal("89.25"),
            "facturada": False,
        },
        {
            "turno_id": "TURNO-001",
            "tipo_actuacion": TipoActuacion.JUICIO_RAPIDO,
            "juzgado": "Juzgado de lo Penal nº 3",
            "numero_procedimiento": "0003456/2026",
            "fecha": date(2026, 2, 18),
            "hora_inicio": "09:00",
            "hora_fin": "10:30",
            "resultado": "Juicio celebrado. Sentencia en 15 días.",
            "importe": Decimal("200.00"),
            "facturada": True,
        },
    )
    for fields in actuaciones:
        _add_with_codigo(session, ActuacionOficio, "ACT-OF", **fields)

    if session.execute(select(ConfiguracionTurnos)).scalar_one_or_none() is None:
        session.add(
            ConfiguracionTurnos(
                id=1,
                partido_judicial="Madrid",
                rotacion_automatica=True,
                frecuencia_rotacion=FrecuenciaRotacion.SEMANAL,
                incompatible_consecutivas=True,
                alerta_horas_antes=24,
            )
        )
    session.commit()
