import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import TRANSACTION_ATTEMPTS, TRANSACTION_BACKOFF_SECONDS
from shared.errors import ConflictError, OrderError, StoreError
from shared.observability.metrics import invoicing_transaction_retries_total

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = {"40001", "40P01"}


def is_retryable(exc: SQLAlchemyError) -> bool:
    """Lock and serialization failures, however the driver classifies them."""
    if isinstance(exc, OperationalError):
        return True
    # asyncpg errors arrive as a plain DBAPIError; the SQLSTATE is on the adapted error
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in RETRYABLE_SQLSTATES


async def run_in_transaction(
    db: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = TRANSACTION_ATTEMPTS,
    backoff_base: float = TRANSACTION_BACKOFF_SECONDS,
    name: str = "unit_of_work",
) -> T:
    """
    Run ``operation`` as one unit of work: commit if it returns, roll back if it raises.

    Lock and serialization failures (deadlocks, "database is locked",
    serialization failures) roll back and retry the whole operation with
    exponential backoff. Business errors roll back and propagate as-is.
    """
    for attempt in range(attempts):
        try:
            result = await operation()
            await db.commit()
            return result
        except OrderError:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            if not is_retryable(exc):
                logger.exception("transaction.store_failure", name=name)
                raise StoreError() from exc
            if attempt >= attempts - 1:
                logger.error("transaction.conflict", name=name, attempts=attempts, error=str(exc))
                raise ConflictError(
                    "The request conflicted with a concurrent update, please retry"
                ) from exc
            invoicing_transaction_retries_total.labels(name=name).inc()
            logger.warning("transaction.retry", name=name, attempt=attempt + 1, error=str(exc))
            await asyncio.sleep(backoff_base * (2 ** attempt))
        except Exception:
            await db.rollback()
            raise
    raise ConflictError("The request conflicted with a concurrent update, please retry")
