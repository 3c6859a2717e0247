from __future__ import annotations

from enum import Enum

from flask import has_request_context, request

SUPPORTED_LANGS = {"es", "ca"}
DEFAULT_LANG = "es"

I18N: dict[str, dict[str, str]] = {
    "turno.penal": {"es": "Penal", "ca": "Penal"},
    "turno.civil": {"es": "Civil", "ca": "Civil"},
    "turno.extranjeria": {"es": "Extranjería", "ca": "Estrangeria"},
    "turno.violencia_genero": {"es": "Violencia de Género", "ca": "Violència de Gènere"},
    "turno.menores": {"es": "Menores", "ca": "Menors"},
    "estado.asignado": {"es": "Asignado", "ca": "Assignat"},
    "estado.confirmado": {"es": "Confirmado", "ca": "Confirmat"},
    "estado.completado": {"es": "Completado", "ca": "Completat"},
    "estado.cancelado": {"es": "Cancelado", "ca": "Cancel·lat"},
    "guardia.presencial": {"es": "Presencial", "ca": "Presencial"},
    "guardia.localizable": {"es": "Localizable", "ca": "Localitzable"},
    "actuacion.detenido": {"es": "Detención", "ca": "Detenció"},
    "actuacion.declaracion": {"es": "Declaración", "ca": "Declaració"},
    "actuacion.juicio_rapido": {"es": "Juicio Rápido", "ca": "Judici Ràpid"},
    "actuacion.orden_proteccion": {"es": "Orden de Protección", "ca": "Ordre de Protecció"},
    "actuacion.asistencia_detencion": {"es": "Asistencia a Detenido", "ca": "Assistència a Detingut"},
    "actuacion.reconocimiento": {"es": "Reconocimiento", "ca": "Reconeixement"},
    "actuacion.recursos": {"es": "Recursos", "ca": "Recursos"},
    "actuacion.otro": {"es": "Otro", "ca": "Altre"},
    "frecuencia.semanal": {"es": "Semanal", "ca": "Setmanal"},
    "frecuencia.quincenal": {"es": "Quincenal", "ca": "Quinzenal"},
    "frecuencia.mensual": {"es": "Mensual", "ca": "Mensual"},
}


def get_locale() -> str:
    if not has_request_context():
        return DEFAULT_LANG
    lang = (request.args.get("lang") or "").strip().lower()
    if lang in SUPPORTED_LANGS:
        return lang
    return request.accept_languages.best_match(sorted(SUPPORTED_LANGS)) or DEFAULT_LANG


def translate(key: str, lang: str | None = None) -> str:
    lang = lang or get_locale()
    return I18N.get(key, {}).get(lang, key)


def labels(prefix: str, enum_cls: type[Enum], lang: str | None = None) -> dict[str, str]:
    return {member.value: translate(f"{prefix}.{member.value}", lang) for member in enum_cls}
