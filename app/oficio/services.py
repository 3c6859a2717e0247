from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
import logging

from sqlalchemy import or_, select

from app.core.models import (
    ESTADOS_CERRADOS,
    AbogadoOficio,
    ActuacionOficio,
    ConfiguracionTurnos,
    EstadoTurno,
    FrecuenciaRotacion,
    Guardia,
    PartidoJudicial,
    Secuencia,
    TipoActuacion,
    TipoGuardia,
    TipoTurno,
    Turno,
    codigo,
)
from app.core.utils import parse_hora
from app.oficio.baremos import Liquidacion, liquidacion_trimestral
from app.oficio.estadisticas import EstadisticasOficio, calcular_estadisticas
from app.oficio.records import (
    AbogadoRecord,
    ActuacionRecord,
    ConfiguracionRecord,
    GuardiaRecord,
    PartidoRecord,
    TurnoRecord,
)

logger = logging.getLogger(__name__)

PREFIJO_TURNO = "TURNO"
PREFIJO_GUARDIA = "GUARD"
PREFIJO_ACTUACION = "ACT-OF"

CONFIG_FIELDS = (
    "partido_judicial",
    "rotacion_automatica",
    "frecuencia_rotacion",
    "incompatible_consecutivas",
    "alerta_horas_antes",
)

TRUE_VALUES = {"1", "true", "si", "sí", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


class NotFoundError(ValueError):
    """Raised when a mutation targets an id that is not in the roster."""


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _required(payload: dict, key: str) -> str:
    value = _text(payload, key)
    if not value:
        raise ValueError(f"Falta {key}")
    return value


def _optional(payload: dict, key: str) -> str | None:
    return _text(payload, key) or None


def parse_iso_date(value: date | str | None, field_name: str) -> date:
    if isinstance(value, date):
        return value
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Formato de fecha invalido para {field_name}")
    raw = (value or "").strip()
    if not raw:
        raise ValueError(f"Falta {field_name}")
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise ValueError(f"Formato de fecha invalido para {field_name}") from exc


def parse_enum(enum_cls: type[Enum], value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    raw = str(value or "").strip().lower()
    if not raw:
        raise ValueError(f"Falta {field_name}")
    try:
        return enum_cls(raw)
    except ValueError as exc:
        raise ValueError(f"Valor invalido para {field_name}: {raw}") from exc


def _filtro_enum(enum_cls: type[Enum], value):
    # Unknown values in a query filter match nothing.
    try:
        return parse_enum(enum_cls, value, "filtro")
    except ValueError:
        return None


def parse_bool(value, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    raw = str(value if value is not None else "").strip().lower()
    if raw in TRUE_VALUES:
        return True
    if raw in FALSE_VALUES:
        return False
    raise ValueError(f"Valor booleano invalido para {field_name}")


def _parse_optional_importe(value) -> Decimal | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValueError("Importe invalido")
    raw = str(value).strip().replace(",", ".")
    try:
        amount = Decimal(raw).quantize(Decimal("0.01"))
    except InvalidOperation as exc:
        raise ValueError("Importe invalido") from exc
    if not amount.is_finite():
        raise ValueError("Importe invalido")
    if amount < 0:
        raise ValueError("El importe no puede ser negativo")
    return amount


def _horario(payload: dict) -> tuple[str, str]:
    hora_inicio = _required(payload, "hora_inicio")
    hora_fin = _required(payload, "hora_fin")
    parse_hora(hora_inicio)
    parse_hora(hora_fin)
    return hora_inicio, hora_fin


def _parse_non_negative_int(value, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Valor invalido para {field_name}")
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Valor invalido para {field_name}") from exc
    if number < 0:
        raise ValueError(f"{field_name} no puede ser negativo")
    return number


class OficioService:
    """Roster store for the turno de oficio.

    One instance is built by the application factory and shared through
    ``app.extensions``. Queries return frozen record snapshots, or ``None``
    for a lookup that misses. Mutations commit immediately and raise
    :class:`NotFoundError` when the target id is unknown.
    """

    def __init__(self, session, comunidad: str = "Comunidad de Madrid") -> None:
        self.session = session
        self.comunidad = comunidad

    # -- internal lookups -------------------------------------------------

    def _turno(self, turno_id: str) -> Turno:
        turno = self.session.get(Turno, (turno_id or "").strip())
        if turno is None:
            raise NotFoundError(f"Turno no encontrado: {turno_id}")
        return turno

    def _guardia(self, guardia_id: str) -> Guardia:
        guardia = self.session.get(Guardia, (guardia_id or "").strip())
        if guardia is None:
            raise NotFoundError(f"Guardia no encontrada: {guardia_id}")
        return guardia

    def _configuracion(self) -> ConfiguracionTurnos:
        config = self.session.get(ConfiguracionTurnos, 1)
        if config is None:
            config = ConfiguracionTurnos(id=1)
            self.session.add(config)
            self.session.flush()
        return config

    def _next_id(self, prefijo: str) -> tuple[str, int]:
        numero = Secuencia.siguiente(self.session, prefijo)
        return codigo(prefijo, numero), numero

    def _turnos(self, *criteria) -> list[TurnoRecord]:
        query = select(Turno).where(*criteria).order_by(Turno.numero.asc())
        return [TurnoRecord.from_model(t) for t in self.session.scalars(query)]

    def _guardias(self, *criteria) -> list[GuardiaRecord]:
        query = select(Guardia).where(*criteria).order_by(Guardia.numero.asc())
        return [GuardiaRecord.from_model(g) for g in self.session.scalars(query)]

    def _actuaciones(self, *criteria, newest_first: bool = True) -> list[ActuacionRecord]:
        order = ActuacionOficio.numero.desc() if newest_first else ActuacionOficio.numero.asc()
        query = select(ActuacionOficio).where(*criteria).order_by(order)
        return [ActuacionRecord.from_model(a) for a in self.session.scalars(query)]

    # -- turnos -----------------------------------------------------------

    def list_turnos(self) -> list[TurnoRecord]:
        return self._turnos()

    def get_turno(self, turno_id: str) -> TurnoRecord | None:
        turno = self.session.get(Turno, (turno_id or "").strip())
        return TurnoRecord.from_model(turno) if turno else None

    def turnos_por_abogado(self, abogado_id: str) -> list[TurnoRecord]:
        return self._turnos(Turno.abogado_id == (abogado_id or "").strip())

    def turnos_por_fecha(self, fecha: date | str) -> list[TurnoRecord]:
        dia = parse_iso_date(fecha, "fecha")
        return self._turnos(Turno.fecha_inicio <= dia, Turno.fecha_fin >= dia)

    def turnos_por_tipo(self, tipo: TipoTurno | str) -> list[TurnoRecord]:
        tipo = _filtro_enum(TipoTurno, tipo)
        if tipo is None:
            return []
        return self._turnos(Turno.tipo == tipo)

    def turnos_activos(self) -> list[TurnoRecord]:
        return self._turnos(Turno.estado.notin_(list(ESTADOS_CERRADOS)))

    def buscar_turnos(
        self,
        tipo: TipoTurno | str | None = None,
        estado: EstadoTurno | str | None = None,
        texto: str = "",
        abogado_id: str = "",
        fecha: date | str | None = None,
        solo_activos: bool = False,
    ) -> list[TurnoRecord]:
        criteria = []
        if abogado_id:
            criteria.append(Turno.abogado_id == abogado_id.strip())
        if fecha:
            dia = parse_iso_date(fecha, "fecha")
            criteria.extend([Turno.fecha_inicio <= dia, Turno.fecha_fin >= dia])
        if solo_activos:
            criteria.append(Turno.estado.notin_(list(ESTADOS_CERRADOS)))
        if tipo:
            tipo = _filtro_enum(TipoTurno, tipo)
            if tipo is None:
                return []
            criteria.append(Turno.tipo == tipo)
        if estado:
            estado = _filtro_enum(EstadoTurno, estado)
            if estado is None:
                return []
            criteria.append(Turno.estado == estado)
        needle = (texto or "").strip()
        if needle:
            pattern = f"%{needle}%"
            criteria.append(
                or_(Turno.abogado_nombre.ilike(pattern), Turno.partido_judicial.ilike(pattern))
            )
        return self._turnos(*criteria)

    def crear_turno(self, payload: dict) -> TurnoRecord:
        tipo = parse_enum(TipoTurno, payload.get("tipo"), "tipo")
        partido = _required(payload, "partido_judicial")
        fecha_inicio = parse_iso_date(payload.get("fecha_inicio"), "fecha_inicio")
        fecha_fin = parse_iso_date(payload.get("fecha_fin"), "fecha_fin")
        if fecha_fin < fecha_inicio:
            raise ValueError("La fecha de fin no puede ser anterior a la de inicio")
        abogado_id = _required(payload, "abogado_id")
        abogado_nombre = _required(payload, "abogado_nombre")

        turno_id, numero = self._next_id(PREFIJO_TURNO)
        turno = Turno(
            id=turno_id,
            numero=numero,
            tipo=tipo,
            partido_judicial=partido,
            fecha_inicio=fecha_inicio,
            fecha_fin=fecha_fin,
            abogado_id=abogado_id,
            abogado_nombre=abogado_nombre,
            estado=EstadoTurno.ASIGNADO,
            observaciones=_optional(payload, "observaciones"),
        )
        self.session.add(turno)
        self.session.commit()
        logger.info("Turno %s creado (%s, %s) para %s", turno.id, tipo.value, partido, abogado_nombre)
        return TurnoRecord.from_model(turno)

    def actualizar_estado_turno(self, turno_id: str, estado: EstadoTurno | str) -> TurnoRecord:
        # Any estado may follow any other.
        nuevo = parse_enum(EstadoTurno, estado, "estado")
        turno = self._turno(turno_id)
        anterior = turno.estado
        turno.estado = nuevo
        self.session.commit()
        logger.info("Turno %s: %s -> %s", turno.id, anterior.value, nuevo.value)
        return TurnoRecord.from_model(turno)

    def asignar_abogado(self, turno_id: str, abogado_id: str, nombre: str = "") -> TurnoRecord:
        turno = self._turno(turno_id)
        abogado_id = (abogado_id or "").strip()
        if not abogado_id:
            raise ValueError("Falta abogado_id")
        nombre = (nombre or "").strip()
        if not nombre:
            abogado = self.session.get(AbogadoOficio, abogado_id)
            if abogado is None:
                raise ValueError("Falta abogado_nombre")
            nombre = abogado.nombre
        turno.abogado_id = abogado_id
        turno.abogado_nombre = nombre
        self.session.commit()
        logger.info("Turno %s reasignado a %s (%s)", turno.id, nombre, abogado_id)
        return TurnoRecord.from_model(turno)

    def swap_turnos(self, turno_id_1: str, turno_id_2: str) -> tuple[TurnoRecord, TurnoRecord]:
        """Exchange the assigned lawyer of two turnos, leaving every other field as is."""
        first = self._turno(turno_id_1)
        second = self._turno(turno_id_2)
        first.abogado_id, second.abogado_id = second.abogado_id, first.abogado_id
        first.abogado_nombre, second.abogado_nombre = second.abogado_nombre, first.abogado_nombre
        self.session.commit()
        logger.info("Intercambio de abogados entre %s y %s", first.id, second.id)
        return TurnoRecord.from_model(first), TurnoRecord.from_model(second)

    # -- guardias ---------------------------------------------------------

    def list_guardias(self) -> list[GuardiaRecord]:
        return self._guardias()

    def get_guardia(self, guardia_id: str) -> GuardiaRecord | None:
        guardia = self.session.get(Guardia, (guardia_id or "").strip())
        return GuardiaRecord.from_model(guardia) if guardia else None

    def guardias_por_turno(self, turno_id: str) -> list[GuardiaRecord]:
        return self._guardias(Guardia.turno_id == (turno_id or "").strip())

    def guardias_pendientes(self) -> list[GuardiaRecord]:
        return self._guardias(Guardia.confirmada.is_(False))

    def crear_guardia(self, payload: dict) -> GuardiaRecord:
        turno = self._turno(_required(payload, "turno_id"))
        fecha = parse_iso_date(payload.get("fecha"), "fecha")
        hora_inicio, hora_fin = _horario(payload)
        tipo = parse_enum(TipoGuardia, payload.get("tipo"), "tipo")
        confirmada = payload.get("confirmada")
        confirmada = parse_bool(confirmada, "confirmada") if confirmada is not None else False

        guardia_id, numero = self._next_id(PREFIJO_GUARDIA)
        guardia = Guardia(
            id=guardia_id,
            numero=numero,
            turno_id=turno.id,
            fecha=fecha,
            hora_inicio=hora_inicio,
            hora_fin=hora_fin,
            tipo=tipo,
            confirmada=confirmada,
        )
        self.session.add(guardia)
        self.session.commit()
        if not turno.cubre(fecha):
            logger.warning(
                "Guardia %s (%s) fuera del periodo del turno %s (%s - %s)",
                guardia.id,
                fecha.isoformat(),
                turno.id,
                turno.fecha_inicio.isoformat(),
                turno.fecha_fin.isoformat(),
            )
        logger.info("Guardia %s creada para el turno %s", guardia.id, turno.id)
        return GuardiaRecord.from_model(guardia)

    def confirmar_guardia(self, guardia_id: str) -> GuardiaRecord:
        guardia = self._guardia(guardia_id)
        if not guardia.confirmada:
            guardia.confirmada = True
            self.session.commit()
            logger.info("Guardia %s confirmada", guardia.id)
        return GuardiaRecord.from_model(guardia)

    # -- actuaciones ------------------------------------------------------

    def list_actuaciones(self) -> list[ActuacionRecord]:
        return self._actuaciones()

    def get_actuacion(self, actuacion_id: str) -> ActuacionRecord | None:
        actuacion = self.session.get(ActuacionOficio, (actuacion_id or "").strip())
        return ActuacionRecord.from_model(actuacion) if actuacion else None

    def actuaciones_por_turno(self, turno_id: str) -> list[ActuacionRecord]:
        return self._actuaciones(ActuacionOficio.turno_id == (turno_id or "").strip())

    def actuaciones_sin_facturar(self) -> list[ActuacionRecord]:
        return self._actuaciones(ActuacionOficio.facturada.is_(False))

    def crear_actuacion(self, payload: dict) -> ActuacionRecord:
        turno = self._turno(_required(payload, "turno_id"))
        tipo = parse_enum(TipoActuacion, payload.get("tipo_actuacion"), "tipo_actuacion")
        juzgado = _required(payload, "juzgado")
        numero_procedimiento = _required(payload, "numero_procedimiento")
        fecha = parse_iso_date(payload.get("fecha"), "fecha")
        hora_inicio, hora_fin = _horario(payload)
        importe = _parse_optional_importe(payload.get("importe"))
        facturada = payload.get("facturada")
        facturada = parse_bool(facturada, "facturada") if facturada is not None else False

        actuacion_id, numero = self._next_id(PREFIJO_ACTUACION)
        actuacion = ActuacionOficio(
            id=actuacion_id,
            numero=numero,
            turno_id=turno.id,
            expediente_id=_optional(payload, "expediente_id"),
            tipo_actuacion=tipo,
            juzgado=juzgado,
            numero_procedimiento=numero_procedimiento,
            fecha=fecha,
            hora_inicio=hora_inicio,
            hora_fin=hora_fin,
            detenido_nombre=_optional(payload, "detenido_nombre"),
            delito=_optional(payload, "delito"),
            resultado=_text(payload, "resultado"),
            observaciones=_optional(payload, "observaciones"),
            importe=importe,
            facturada=facturada,
        )
        self.session.add(actuacion)
        self.session.commit()
        logger.info("Actuacion %s (%s) registrada en el turno %s", actuacion.id, tipo.value, turno.id)
        return ActuacionRecord.from_model(actuacion)

    # -- catalogues and configuration -------------------------------------

    def list_abogados(self) -> list[AbogadoRecord]:
        query = select(AbogadoOficio).order_by(AbogadoOficio.numero.asc())
        return [AbogadoRecord.from_model(a) for a in self.session.scalars(query)]

    def get_abogado(self, abogado_id: str) -> AbogadoRecord | None:
        abogado = self.session.get(AbogadoOficio, (abogado_id or "").strip())
        return AbogadoRecord.from_model(abogado) if abogado else None

    def list_partidos(self) -> list[PartidoRecord]:
        query = select(PartidoJudicial).order_by(PartidoJudicial.numero.asc())
        return [PartidoRecord.from_model(p) for p in self.session.scalars(query)]

    def get_configuracion(self) -> ConfiguracionRecord:
        return ConfiguracionRecord.from_model(self._configuracion())

    def update_config(self, changes: dict) -> ConfiguracionRecord:
        unknown = sorted(set(changes) - set(CONFIG_FIELDS))
        if unknown:
            raise ValueError(f"Campos de configuracion desconocidos: {', '.join(unknown)}")

        parsed: dict[str, object] = {}
        if "partido_judicial" in changes:
            parsed["partido_judicial"] = _required(changes, "partido_judicial")
        if "rotacion_automatica" in changes:
            parsed["rotacion_automatica"] = parse_bool(changes["rotacion_automatica"], "rotacion_automatica")
        if "frecuencia_rotacion" in changes:
            parsed["frecuencia_rotacion"] = parse_enum(
                FrecuenciaRotacion, changes["frecuencia_rotacion"], "frecuencia_rotacion"
            )
        if "incompatible_consecutivas" in changes:
            parsed["incompatible_consecutivas"] = parse_bool(
                changes["incompatible_consecutivas"], "incompatible_consecutivas"
            )
        if "alerta_horas_antes" in changes:
            parsed["alerta_horas_antes"] = _parse_non_negative_int(
                changes["alerta_horas_antes"], "alerta_horas_antes"
            )

        config = self._configuracion()
        for key, value in parsed.items():
            setattr(config, key, value)
        self.session.commit()
        if parsed:
            logger.info("Configuracion de turnos actualizada: %s", ", ".join(sorted(parsed)))
        return ConfiguracionRecord.from_model(config)

    # -- aggregates -------------------------------------------------------

    def estadisticas(self, hoy: date | None = None) -> EstadisticasOficio:
        return calcular_estadisticas(
            self._actuaciones(newest_first=False),
            self.list_turnos(),
            hoy or date.today(),
        )

    def liquidacion(
        self,
        anio: int,
        trimestre: str,
        comunidad: str | None = None,
        tipo_actuacion: TipoActuacion | str | None = None,
    ) -> Liquidacion:
        tipo = parse_enum(TipoActuacion, tipo_actuacion, "tipo_actuacion").value if tipo_actuacion else None
        return liquidacion_trimestral(
            self._actuaciones(newest_first=False),
            anio,
            trimestre,
            comunidad or self.comunidad,
            tipo,
        )
