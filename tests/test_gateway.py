"""Tests for Deadline and DatabaseGateway."""

import threading
import time

import pytest
from sqlalchemy import text

from inventory.api.errors import DatabaseError, QueryTimeoutError
from inventory.database.gateway import DatabaseGateway, Deadline


@pytest.fixture
def gateway(engine):
    gw = DatabaseGateway(engine)
    yield gw
    gw.shutdown()


class TestDeadline:

    def test_remaining_counts_down(self):
        deadline = Deadline(10)
        first = deadline.remaining()
        time.sleep(0.01)

        assert 0 < deadline.remaining() < first <= 10
        assert not deadline.expired()

    def test_expires(self):
        deadline = Deadline(0.01)
        time.sleep(0.03)

        assert deadline.expired()
        assert deadline.remaining() == 0.0

    @pytest.mark.parametrize("bad", [0, -1])
    def test_rejects_non_positive_timeout(self, bad):
        with pytest.raises(ValueError):
            Deadline(bad)


class TestDatabaseGateway:

    def test_query_returns_rows(self, gateway):
        rows = gateway.query(text("SELECT 1 AS one, 'a' AS two"), None, Deadline(5))

        assert [tuple(r) for r in rows] == [(1, "a")]

    def test_query_one_returns_none_without_rows(self, gateway):
        row = gateway.query_one(text("SELECT productId FROM products WHERE productId = :id"),
                                {"id": 1}, Deadline(5))

        assert row is None

    def test_execute_reports_rowcount_and_insert_id(self, gateway):
        insert = text("INSERT INTO products (manufacturer, sku, upc, pricePerUnit, quantityOnHand, productName) "
                      "VALUES ('m', 's', 'u', 1, 1, 'n')")

        first = gateway.execute(insert, None, Deadline(5))
        second = gateway.execute(insert, None, Deadline(5))
        deleted = gateway.execute(text("DELETE FROM products WHERE productId > 0"), None, Deadline(5))

        assert first.rowcount == 1
        assert second.last_insert_id == first.last_insert_id + 1
        assert deleted.rowcount == 2

    def test_slow_work_times_out(self, gateway):
        with pytest.raises(QueryTimeoutError):
            gateway._run("slow", lambda: time.sleep(0.3), Deadline(0.05))

    def test_expired_deadline_is_not_dispatched(self, gateway):
        calls = []
        deadline = Deadline(0.01)
        time.sleep(0.03)

        with pytest.raises(QueryTimeoutError):
            gateway._run("late", lambda: calls.append(1), deadline)
        assert calls == []

    def test_sqlalchemy_errors_become_database_error(self, gateway):
        with pytest.raises(DatabaseError):
            gateway.query(text("SELECT * FROM no_such_table"), None, Deadline(5))

    def test_rejects_non_engine(self):
        with pytest.raises(TypeError):
            DatabaseGateway("sqlite://")

    def test_abandoned_work_reports_completion(self, gateway):
        finished = threading.Event()

        with pytest.raises(QueryTimeoutError):
            gateway._run("slow", lambda: time.sleep(0.2), Deadline(0.05), on_abandoned=finished.set)

        assert not finished.is_set()
        assert finished.wait(timeout=2)

    def test_completion_hook_unused_when_in_time(self, gateway):
        finished = threading.Event()

        assert gateway._run("fast", lambda: 42, Deadline(5), on_abandoned=finished.set) == 42
        assert not finished.is_set()

    def test_workers_default_to_pool_size(self, engine):
        gw = DatabaseGateway(engine)
        try:
            assert gw.max_workers == engine.pool.size()
        finally:
            gw.shutdown()

    def test_explicit_worker_count(self, engine):
        gw = DatabaseGateway(engine, max_workers=3)
        try:
            assert gw.max_workers == 3
        finally:
            gw.shutdown()
