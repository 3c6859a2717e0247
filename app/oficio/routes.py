from __future__ import annotations

from datetime import date

from flask import abort, current_app, jsonify, make_response, request

from app.core.i18n import get_locale, labels
from app.core.models import EstadoTurno, FrecuenciaRotacion, TipoActuacion, TipoGuardia, TipoTurno
from app.oficio import oficio_bp
from app.oficio.baremos import BAREMOS, get_baremo, liquidacion_csv, trimestre_de
from app.oficio.services import NotFoundError, OficioService, parse_bool, parse_iso_date


def _service() -> OficioService:
    return current_app.extensions["oficio"]


def _payload() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return {k: v for k, v in request.form.items()}


def _flag(name: str) -> bool:
    raw = request.args.get(name)
    if raw is None:
        return False
    try:
        return parse_bool(raw, name)
    except ValueError as exc:
        abort(400, description=str(exc))


def _fail(exc: ValueError):
    if isinstance(exc, NotFoundError):
        abort(404, description=str(exc))
    abort(400, description=str(exc))


@oficio_bp.get("/turnos")
def turnos_list():
    try:
        rows = _service().buscar_turnos(
            tipo=request.args.get("tipo", "").strip() or None,
            estado=request.args.get("estado", "").strip() or None,
            texto=request.args.get("q", ""),
            abogado_id=request.args.get("abogado_id", ""),
            fecha=request.args.get("fecha", "").strip() or None,
            solo_activos=_flag("activos"),
        )
    except ValueError as exc:
        _fail(exc)
    return jsonify([row.to_dict() for row in rows])


@oficio_bp.post("/turnos")
def turnos_create():
    try:
        turno = _service().crear_turno(_payload())
    except ValueError as exc:
        _fail(exc)
    return jsonify(turno.to_dict()), 201


@oficio_bp.get("/turnos/<turno_id>")
def turno_detail(turno_id: str):
    turno = _service().get_turno(turno_id)
    if turno is None:
        abort(404, description=f"Turno no encontrado: {turno_id}")
    return jsonify(turno.to_dict())


@oficio_bp.get("/turnos/<turno_id>/guardias")
def turno_guardias(turno_id: str):
    service = _service()
    if service.get_turno(turno_id) is None:
        abort(404, description=f"Turno no encontrado: {turno_id}")
    return jsonify([row.to_dict() for row in service.guardias_por_turno(turno_id)])


@oficio_bp.get("/turnos/<turno_id>/actuaciones")
def turno_actuaciones(turno_id: str):
    service = _service()
    if service.get_turno(turno_id) is None:
        abort(404, description=f"Turno no encontrado: {turno_id}")
    return jsonify([row.to_dict() for row in service.actuaciones_por_turno(turno_id)])


@oficio_bp.patch("/turnos/<turno_id>/estado")
def turno_change_state(turno_id: str):
    try:
        turno = _service().actualizar_estado_turno(turno_id, _payload().get("estado"))
    except ValueError as exc:
        _fail(exc)
    return jsonify(turno.to_dict())


@oficio_bp.patch("/turnos/<turno_id>/abogado")
def turno_assign_lawyer(turno_id: str):
    payload = _payload()
    try:
        turno = _service().asignar_abogado(
            turno_id,
            str(payload.get("abogado_id") or ""),
            str(payload.get("abogado_nombre") or ""),
        )
    except ValueError as exc:
        _fail(exc)
    return jsonify(turno.to_dict())


@oficio_bp.post("/turnos/intercambio")
def turnos_swap():
    payload = _payload()
    try:
        first, second = _service().swap_turnos(
            str(payload.get("turno_id_1") or ""),
            str(payload.get("turno_id_2") or ""),
        )
    except ValueError as exc:
        _fail(exc)
    return jsonify([first.to_dict(), second.to_dict()])


@oficio_bp.get("/guardias")
def guardias_list():
    service = _service()
    turno_id = request.args.get("turno_id", "").strip()
    if turno_id:
        rows = service.guardias_por_turno(turno_id)
    else:
        rows = service.list_guardias()
    if _flag("pendientes"):
        rows = [row for row in rows if not row.confirmada]
    return jsonify([row.to_dict() for row in rows])


@oficio_bp.post("/guardias")
def guardias_create():
    try:
        guardia = _service().crear_guardia(_payload())
    except ValueError as exc:
        _fail(exc)
    return jsonify(guardia.to_dict()), 201


@oficio_bp.patch("/guardias/<guardia_id>/confirmar")
def guardia_confirm(guardia_id: str):
    try:
        guardia = _service().confirmar_guardia(guardia_id)
    except ValueError as exc:
        _fail(exc)
    return jsonify(guardia.to_dict())


@oficio_bp.get("/actuaciones")
def actuaciones_list():
    service = _service()
    turno_id = request.args.get("turno_id", "").strip()
    if turno_id:
        rows = service.actuaciones_por_turno(turno_id)
    else:
        rows = service.list_actuaciones()
    if _flag("sin_facturar"):
        rows = [row for row in rows if not row.facturada]
    return jsonify([row.to_dict() for row in rows])


@oficio_bp.post("/actuaciones")
def actuaciones_create():
    try:
        actuacion = _service().crear_actuacion(_payload())
    except ValueError as exc:
        _fail(exc)
    return jsonify(actuacion.to_dict()), 201


@oficio_bp.get("/actuaciones/<actuacion_id>")
def actuacion_detail(actuacion_id: str):
    actuacion = _service().get_actuacion(actuacion_id)
    if actuacion is None:
        abort(404, description=f"Actuacion no encontrada: {actuacion_id}")
    return jsonify(actuacion.to_dict())


@oficio_bp.get("/abogados")
def abogados_list():
    rows = _service().list_abogados()
    if _flag("disponibles"):
        rows = [row for row in rows if row.disponibilidad]
    return jsonify([row.to_dict() for row in rows])


@oficio_bp.get("/abogados/<abogado_id>")
def abogado_detail(abogado_id: str):
    service = _service()
    abogado = service.get_abogado(abogado_id)
    if abogado is None:
        abort(404, description=f"Abogado no encontrado: {abogado_id}")
    return jsonify(
        {
            **abogado.to_dict(),
            "turnos": [row.to_dict() for row in service.turnos_por_abogado(abogado.id)],
        }
    )


@oficio_bp.get("/partidos-judiciales")
def partidos_list():
    return jsonify([row.to_dict() for row in _service().list_partidos()])


@oficio_bp.get("/oficio/configuracion")
def configuracion_detail():
    return jsonify(_service().get_configuracion().to_dict())


@oficio_bp.patch("/oficio/configuracion")
def configuracion_update():
    try:
        config = _service().update_config(_payload())
    except ValueError as exc:
        _fail(exc)
    return jsonify(config.to_dict())


@oficio_bp.get("/oficio/estadisticas")
def estadisticas():
    raw = request.args.get("hoy", "").strip()
    try:
        hoy = parse_iso_date(raw, "hoy") if raw else date.today()
    except ValueError as exc:
        _fail(exc)
    return jsonify(_service().estadisticas(hoy).to_dict())


@oficio_bp.get("/oficio/baremos")
def baremos_list():
    comunidad = request.args.get("comunidad", "").strip()
    if not comunidad:
        return jsonify([baremo.to_dict() for baremo in BAREMOS])
    baremo = get_baremo(comunidad)
    if baremo is None:
        abort(404, description=f"Baremo no encontrado: {comunidad}")
    return jsonify(baremo.to_dict())


def _liquidacion_from_args():
    today = date.today()
    anio = request.args.get("anio", type=int) or today.year
    trimestre = request.args.get("trimestre", "").strip() or trimestre_de(today)
    try:
        return _service().liquidacion(
            anio,
            trimestre,
            request.args.get("comunidad", "").strip() or None,
            request.args.get("tipo", "").strip() or None,
        )
    except ValueError as exc:
        _fail(exc)


@oficio_bp.get("/oficio/liquidacion")
def liquidacion_detail():
    return jsonify(_liquidacion_from_args().to_dict())


@oficio_bp.get("/oficio/liquidacion.csv")
def liquidacion_export():
    liquidacion = _liquidacion_from_args()
    response = make_response(liquidacion_csv(liquidacion, _service().list_turnos()))
    response.headers["Content-Type"] = "text/csv; charset=utf-8"
    response.headers["Content-Disposition"] = (
        f'attachment; filename="liquidacion-{liquidacion.anio}-{liquidacion.trimestre}.csv"'
    )
    return response


@oficio_bp.get("/oficio/catalogos")
def catalogos():
    lang = get_locale()
    return jsonify(
        {
            "lang": lang,
            "tipos_turno": labels("turno", TipoTurno, lang),
            "estados_turno": labels("estado", EstadoTurno, lang),
            "tipos_guardia": labels("guardia", TipoGuardia, lang),
            "tipos_actuacion": labels("actuacion", TipoActuacion, lang),
            "frecuencias_rotacion": labels("frecuencia", FrecuenciaRotacion, lang),
        }
    )
