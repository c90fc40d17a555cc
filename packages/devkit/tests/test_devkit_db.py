import pytest
from sqlalchemy.exc import OperationalError

from devkit.clock import now_utc
from devkit.db import AsyncDatabaseManager, is_transient_db_error, normalize_postgres_dsn


def test_normalize_postgres_dsn() -> None:
    assert normalize_postgres_dsn("postgresql://u:p@h:5432/db") == "postgresql+psycopg://u:p@h:5432/db"
    assert normalize_postgres_dsn("postgres://u:p@h:5432/db") == "postgresql+psycopg://u:p@h:5432/db"
    assert normalize_postgres_dsn("postgresql+psycopg://u:p@h:5432/db") == "postgresql+psycopg://u:p@h:5432/db"


def test_transient_error_detection() -> None:
    assert is_transient_db_error(OperationalError("stmt", {}, Exception("down")))
    assert not is_transient_db_error(ValueError("nope"))


def test_now_utc_is_timezone_aware() -> None:
    assert now_utc().utcoffset() is not None
    assert now_utc().utcoffset().total_seconds() == 0


class _FakeSessionManager(AsyncDatabaseManager):
    def __init__(self, failures: list[Exception]) -> None:
        self.delays: list[float] = []

        async def record_sleep(delay: float) -> None:
            self.delays.append(delay)

        super().__init__("postgresql://u:p@h/db", base_delay_seconds=0.1, sleep_fn=record_sleep)
        self._failures = failures
        self.reconnects = 0

    async def reconnect(self) -> None:
        self.reconnects += 1

    def session(self):
        manager = self

        class _Ctx:
            async def __aenter__(self):
                if manager._failures:
                    raise manager._failures.pop(0)
                return "session"

            async def __aexit__(self, *_args) -> None:
                return None

        return _Ctx()


@pytest.mark.asyncio
async def test_run_with_session_retries_transient_errors() -> None:
    manager = _FakeSessionManager([OperationalError("stmt", {}, Exception("down"))])

    async def _work(session):
        return f"ok:{session}"

    assert await manager.run_with_session(_work) == "ok:session"
    assert manager.reconnects == 1
    assert manager.delays == [0.1]


@pytest.mark.asyncio
async def test_run_with_session_does_not_retry_logic_errors() -> None:
    manager = _FakeSessionManager([ValueError("bad row")])

    async def _work(session):
        return session

    with pytest.raises(ValueError):
        await manager.run_with_session(_work)
    assert manager.reconnects == 0
