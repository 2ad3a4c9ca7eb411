import pytest
from sqlalchemy.exc import DBAPIError, OperationalError, ProgrammingError

from services.user_service.models import Role
from shared.errors import ConflictError, InsufficientStockError, StoreError
from shared.transactions import run_in_transaction


def locked():
    return OperationalError("UPDATE products ...", {}, Exception("database is locked"))


class AdaptedDriverError(Exception):
    """Shape of an asyncpg error after SQLAlchemy adapts it: generic class, SQLSTATE attached."""

    def __init__(self, message, sqlstate):
        super().__init__(message)
        self.sqlstate = sqlstate


def driver_error(sqlstate, message="deadlock detected"):
    return DBAPIError("UPDATE products ...", {}, AdaptedDriverError(message, sqlstate))


async def test_commits_when_the_operation_returns(db, count_rows):
    async def op():
        db.add(Role(name="auditor"))
        return "done"

    assert await run_in_transaction(db, op) == "done"
    assert await count_rows(Role) == 1


async def test_retries_lock_failures_until_success(db, count_rows):
    calls = []

    async def op():
        calls.append(1)
        if len(calls) < 3:
            raise locked()
        db.add(Role(name="auditor"))

    await run_in_transaction(db, op, attempts=5, backoff_base=0)

    assert len(calls) == 3
    assert await count_rows(Role) == 1


async def test_exhausted_retries_become_a_conflict(db):
    calls = []

    async def op():
        calls.append(1)
        raise locked()

    with pytest.raises(ConflictError) as excinfo:
        await run_in_transaction(db, op, attempts=3, backoff_base=0)

    assert len(calls) == 3
    assert excinfo.value.status_code == 409


async def test_business_errors_roll_back_without_retry(db, count_rows):
    calls = []

    async def op():
        calls.append(1)
        db.add(Role(name="auditor"))
        await db.flush()
        raise InsufficientStockError(1, 0, 1)

    with pytest.raises(InsufficientStockError):
        await run_in_transaction(db, op, attempts=3, backoff_base=0)

    assert len(calls) == 1
    assert await count_rows(Role) == 0


async def test_unexpected_store_failures_become_store_errors(db):
    async def op():
        raise ProgrammingError("SELECT nope", {}, Exception("no such table"))

    with pytest.raises(StoreError) as excinfo:
        await run_in_transaction(db, op, backoff_base=0)

    assert excinfo.value.status_code == 500
    assert excinfo.value.to_dict()["detail"] == "Internal Server Error"


@pytest.mark.parametrize("sqlstate", ["40P01", "40001"])
async def test_adapted_deadlocks_and_serialization_failures_are_retried(db, count_rows, sqlstate):
    calls = []

    async def op():
        calls.append(1)
        if len(calls) < 2:
            raise driver_error(sqlstate)
        db.add(Role(name="auditor"))

    await run_in_transaction(db, op, attempts=3, backoff_base=0)

    assert len(calls) == 2
    assert await count_rows(Role) == 1


async def test_persistent_adapted_deadlock_becomes_a_conflict(db):
    calls = []

    async def op():
        calls.append(1)
        raise driver_error("40P01")

    with pytest.raises(ConflictError) as excinfo:
        await run_in_transaction(db, op, attempts=3, backoff_base=0)

    assert len(calls) == 3
    assert excinfo.value.status_code == 409


async def test_other_driver_errors_are_not_retried(db):
    calls = []

    async def op():
        calls.append(1)
        raise driver_error("23505", "duplicate key value")

    with pytest.raises(StoreError):
        await run_in_transaction(db, op, attempts=3, backoff_base=0)

    assert len(calls) == 1
