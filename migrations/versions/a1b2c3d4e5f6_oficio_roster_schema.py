"""oficio duty roster schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-03-02 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


TIPO_TURNO = sa.Enum("PENAL", "CIVIL", "EXTRANJERIA", "VIOLENCIA_GENERO", "MENORES", name="tipo_turno")
ESTADO_TURNO = sa.Enum("ASIGNADO", "CONFIRMADO", "COMPLETADO", "CANCELADO", name="estado_turno")
TIPO_GUARDIA = sa.Enum("PRESENCIAL", "LOCALIZABLE", name="tipo_guardia")
TIPO_ACTUACION = sa.Enum(
    "DETENIDO",
    "DECLARACION",
    "JUICIO_RAPIDO",
    "ORDEN_PROTECCION",
    "ASISTENCIA_DETENCION",
    "RECONOCIMIENTO",
    "RECURSOS",
    "OTRO",
    name="tipo_actuacion",
)
FRECUENCIA_ROTACION = sa.Enum("SEMANAL", "QUINCENAL", "MENSUAL", name="frecuencia_rotacion")


def upgrade():
    op.create_table(
        "secuencia",
        sa.Column("prefijo", sa.String(length=20), nullable=False),
        sa.Column("ultimo", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("prefijo"),
    )
    op.create_table(
        "partido_judicial",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("numero", sa.Integer(), nullable=False),
        sa.Column("nombre", sa.String(length=120), nullable=False),
        sa.Column("provincia", sa.String(length=120), nullable=False),
        sa.Column("turnos_disponibles", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("numero"),
        sa.UniqueConstraint("nombre"),
    )
    op.create_table(
        "abogado_oficio",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("numero", sa.Integer(), nullable=False),
        sa.Column("nombre", sa.String(length=160), nullable=False),
        sa.Column("numero_colegiado", sa.String(length=30), nullable=False),
        sa.Column("turnos_inscritos", sa.JSON(), nullable=False),
        sa.Column("disponibilidad", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("numero"),
        sa.UniqueConstraint("numero_colegiado"),
    )
    op.create_table(
        "turno",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("numero", sa.Integer(), nullable=False),
        sa.Column("tipo", TIPO_TURNO, nullable=False),
        sa.Column("partido_judicial", sa.String(length=120), nullable=False),
        sa.Column("fecha_inicio", sa.Date(), nullable=False),
        sa.Column("fecha_fin", sa.Date(), nullable=False),
        sa.Column("abogado_id", sa.String(length=20), nullable=False),
        sa.Column("abogado_nombre", sa.String(length=160), nullable=False),
        sa.Column("estado", ESTADO_TURNO, nullable=False),
        sa.Column("observaciones", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("fecha_fin >= fecha_inicio", name="ck_turno_fechas"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("numero"),
    )
    with op.batch_alter_table("turno", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_turno_abogado_id"), ["abogado_id"], unique=False)
        batch_op.create_index("ix_turno_fechas", ["fecha_inicio", "fecha_fin"], unique=False)

    op.create_table(
        "guardia",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("numero", sa.Integer(), nullable=False),
        sa.Column("turno_id", sa.String(length=20), nullable=False),
        sa.Column("fecha", sa.Date(), nullable=False),
        sa.Column("hora_inicio", sa.String(length=5), nullable=False),
        sa.Column("hora_fin", sa.String(length=5), nullable=False),
        sa.Column("tipo", TIPO_GUARDIA, nullable=False),
        sa.Column("confirmada", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["turno_id"], ["turno.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("numero"),
    )
    with op.batch_alter_table("guardia", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_guardia_turno_id"), ["turno_id"], unique=False)

    op.create_table(
        "actuacion_oficio",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("numero", sa.Integer(), nullable=False),
        sa.Column("turno_id", sa.String(length=20), nullable=False),
        sa.Column("expediente_id", sa.String(length=40), nullable=True),
        sa.Column("tipo_actuacion", TIPO_ACTUACION, nullable=False),
        sa.Column("juzgado", sa.String(length=200), nullable=False),
        sa.Column("numero_procedimiento", sa.String(length=60), nullable=False),
        sa.Column("fecha", sa.Date(), nullable=False),
        sa.Column("hora_inicio", sa.String(length=5), nullable=False),
        sa.Column("hora_fin", sa.String(length=5), nullable=False),
        sa.Column("detenido_nombre", sa.String(length=160), nullable=True),
        sa.Column("delito", sa.String(length=200), nullable=True),
        sa.Column("resultado", sa.Text(), nullable=False),
        sa.Column("observaciones", sa.Text(), nullable=True),
        sa.Column("importe", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("facturada", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("importe IS NULL OR importe >= 0", name="ck_actuacion_importe"),
        sa.ForeignKeyConstraint(["turno_id"], ["turno.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("numero"),
    )
    with op.batch_alter_table("actuacion_oficio", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_actuacion_oficio_turno_id"), ["turno_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_actuacion_oficio_fecha"), ["fecha"], unique=False)

    op.create_table(
        "configuracion_turnos",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("partido_judicial", sa.String(length=120), nullable=False),
        sa.Column("rotacion_automatica", sa.Boolean(), nullable=False),
        sa.Column("frecuencia_rotacion", FRECUENCIA_ROTACION, nullable=False),
        sa.Column("incompatible_consecutivas", sa.Boolean(), nullable=False),
        sa.Column("alerta_horas_antes", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("alerta_horas_antes >= 0", name="ck_config_alerta"),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade():
    op.drop_table("configuracion_turnos")
    with op.batch_alter_table("actuacion_oficio", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_actuacion_oficio_fecha"))
        batch_op.drop_index(batch_op.f("ix_actuacion_oficio_turno_id"))
    op.drop_table("actuacion_oficio")
    with op.batch_alter_table("guardia", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_guardia_turno_id"))
    op.drop_table("guardia")
    with op.batch_alter_table("turno", schema=None) as batch_op:
        batch_op.drop_index("ix_turno_fechas")
        batch_op.drop_index(batch_op.f("ix_turno_abogado_id"))
    op.drop_table("turno")
    op.drop_table("abogado_oficio")
    op.drop_table("partido_judicial")
    op.drop_table("secuencia")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for enum_type in (FRECUENCIA_ROTACION, TIPO_ACTUACION, TIPO_GUARDIA, ESTADO_TURNO, TIPO_TURNO):
            enum_type.drop(bind, checkfirst=True)
