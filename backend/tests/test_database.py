"""Engine options chosen from DATABASE_URL."""

from app.database import engine_options


def test_postgres_url_gets_connection_pool():
    options = engine_options("postgresql://user:pw@db/students")
    assert options["pool_size"] == 10
    assert options["max_overflow"] == 20
    assert options["pool_pre_ping"] is True
    assert "connect_args" not in options


def test_sqlite_url_allows_cross_thread_connections():
    options = engine_options("sqlite:///./students.db")
    assert options["connect_args"] == {"check_same_thread": False}
    assert "pool_size" not in options
