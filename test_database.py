# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""Store handle: startup retry policy and schema bootstrap."""

import asyncio

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from devtrack.core.database import Database, FixedIntervalRetry, RetryPolicy


def flaky_bootstrap(database, failures):
    """Replace the bootstrap step with one that fails ``failures`` times."""
    calls = {"n": 0}
    real = database._bootstrap

    def bootstrap():
        calls["n"] += 1
        if calls["n"] <= failures:
            raise OperationalError("SELECT 1", {}, ConnectionRefusedError("store down"))
        real()

    database._bootstrap = bootstrap
    return calls


def recording_sleep():
    delays = []

    async def sleep(seconds):
        delays.append(seconds)

    return delays, sleep


class TestRetryPolicy:
    def test_fixed_interval_forever(self):
        policy = FixedIntervalRetry(5)
        assert [policy.next_delay(n) for n in (1, 2, 100)] == [5, 5, 5]

    def test_fixed_interval_bounded(self):
        policy = FixedIntervalRetry(2, max_attempts=3)
        assert policy.next_delay(2) == 2
        assert policy.next_delay(3) is None

    def test_policy_base_is_abstract(self):
        with pytest.raises(TypeError):
            RetryPolicy()

    def test_custom_policy_only_needs_next_delay(self):
        class Never(RetryPolicy):
            def next_delay(self, attempt):
                return None

        assert Never().next_delay(1) is None


class TestConnect:
    def test_connects_first_try(self):
        database = Database("sqlite://")
        delays, sleep = recording_sleep()
        asyncio.run(database.connect(FixedIntervalRetry(5), sleep=sleep))
        assert database.connected
        assert delays == []
        database.dispose()

    def test_retries_until_store_answers(self):
        database = Database("sqlite://")
        calls = flaky_bootstrap(database, failures=3)
        delays, sleep = recording_sleep()

        asyncio.run(database.connect(FixedIntervalRetry(5), sleep=sleep))

        assert calls["n"] == 4
        assert delays == [5, 5, 5]
        assert database.connected
        database.dispose()

    def test_gives_up_when_policy_says_so(self):
        database = Database("sqlite://")
        flaky_bootstrap(database, failures=10)
        delays, sleep = recording_sleep()

        with pytest.raises(OperationalError):
            asyncio.run(database.connect(FixedIntervalRetry(1, max_attempts=2), sleep=sleep))

        assert delays == [1]
        assert not database.connected

    def test_bootstrap_creates_tables(self):
        database = Database("sqlite://")
        asyncio.run(database.connect(FixedIntervalRetry(5), sleep=recording_sleep()[1]))
        with database.engine.connect() as conn:
            names = {
                row[0] for row in conn.execute(text("SELECT name FROM sqlite_master WHERE type = 'table'"))
            }
        assert {"users", "projects", "project_members", "tickets", "ticket_comments"} <= names
        database.dispose()

    def test_dispose_marks_disconnected(self):
        database = Database("sqlite://")
        asyncio.run(database.connect(FixedIntervalRetry(5), sleep=recording_sleep()[1]))
        database.dispose()
        assert not database.connected
