"""The `MetaData` every URITHI table attaches to.

Constraint and index names follow a fixed convention so Alembic
autogenerate produces stable diffs:

    ix_<table>_<cols>   uq_<table>_<cols>   ck_<table>_<name>   pk_<table>
"""

from sqlalchemy import MetaData

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_N_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "pk": "pk_%(table_name)s",
    }
)
