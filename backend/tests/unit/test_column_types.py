"""Unit tests: the Point column type per dialect."""
import pytest
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import CreateTable

from models.location import Location
from models.types import Point

pytestmark = pytest.mark.unit

PG = postgresql.dialect()
SQLITE = sqlite.dialect()


def test_postgresql_uses_native_point_column():
    """On PostgreSQL the coordinates column is a native POINT; SQLite keeps a WKT string."""
    assert "coordinates POINT NOT NULL" in str(CreateTable(Location.__table__).compile(dialect=PG))
    assert "coordinates VARCHAR(64) NOT NULL" in str(CreateTable(Location.__table__).compile(dialect=SQLITE))


def test_postgresql_point_text_form():
    """(lat, lon) binds as PostgreSQL's (x,y) text with x = longitude."""
    point = Point()
    assert point.process_bind_param((40.7306, -74.0021), PG) == "(-74.0021,40.7306)"
    assert point.process_result_value("(-74.0021,40.7306)", PG) == (40.7306, -74.0021)


def test_wkt_point_text_form():
    """Other dialects store WKT POINT(lon lat)."""
    point = Point()
    assert point.process_bind_param((40.7306, -74.0021), SQLITE) == "POINT(-74.0021 40.7306)"
    assert point.process_result_value("POINT(-74.0021 40.7306)", SQLITE) == (40.7306, -74.0021)


def test_unparseable_point_raises():
    with pytest.raises(ValueError):
        Point().process_result_value("40.7,-74.0", SQLITE)
