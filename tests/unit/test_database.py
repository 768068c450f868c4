"""Tests for backend-dependent engine options."""

import pytest
from sqlalchemy.pool import StaticPool

from api.config import settings
from api.database import engine, engine_options


class TestEngineOptions:
    @pytest.mark.parametrize("url", ["sqlite:///:memory:", "sqlite://"])
    def test_in_memory_sqlite_shares_one_connection(self, url):
        options = engine_options(url)

        assert options["poolclass"] is StaticPool
        assert options["connect_args"] == {"check_same_thread": False}
        assert "pool_size" not in options

    def test_file_sqlite_has_no_pool_sizing(self):
        options = engine_options("sqlite:///./fueleu.db")

        assert "poolclass" not in options
        assert "pool_size" not in options
        assert "max_overflow" not in options
        assert options["connect_args"] == {"check_same_thread": False}

    def test_postgres_keeps_pool_settings(self):
        options = engine_options("postgresql://ledger:secret@db:5432/fueleu")

        assert options["pool_pre_ping"] is True
        assert options["pool_size"] == settings.db_pool_size
        assert options["max_overflow"] == settings.db_max_overflow
        assert "connect_args" not in options

    def test_test_engine_is_in_memory_sqlite(self):
        assert engine.url.get_backend_name() == "sqlite"
        assert isinstance(engine.pool, StaticPool)
