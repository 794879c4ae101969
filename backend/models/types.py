"""Column types shared by models."""
import re

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator, UserDefinedType

_WKT_POINT = re.compile(r"^\s*POINT\s*\(\s*(-?[\d.eE+-]+)\s+(-?[\d.eE+-]+)\s*\)\s*$", re.IGNORECASE)
_PG_POINT = re.compile(r"^\s*\(\s*(-?[\d.eE+-]+)\s*,\s*(-?[\d.eE+-]+)\s*\)\s*$")


class PgPoint(UserDefinedType):
    """PostgreSQL's native geometric point; text form is ``(x,y)``."""

    cache_ok = True

    def get_col_spec(self, **kw):
        return "POINT"


class Point(TypeDecorator):
    """
    2-D point; Python value is ``(latitude, longitude)``.
    PostgreSQL stores a native POINT ``(lon,lat)``; other databases store WKT ``POINT(lon lat)``.
    """

    impl = String(64)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PgPoint())
        return dialect.type_descriptor(String(64))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        latitude, longitude = value
        if dialect.name == "postgresql":
            return f"({float(longitude)!r},{float(latitude)!r})"
        return f"POINT({float(longitude)!r} {float(latitude)!r})"

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        match = _PG_POINT.match(value) if dialect.name == "postgresql" else _WKT_POINT.match(value)
        if match is None:
            raise ValueError(f"Not a point: {value!r}")
        longitude, latitude = float(match.group(1)), float(match.group(2))
        return (latitude, longitude)
