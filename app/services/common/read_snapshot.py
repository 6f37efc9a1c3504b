import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import CancellationError, QueryTimeoutError, StorageError

logger = logging.getLogger("app.aggregation")

CancellationProbe = Callable[[], Awaitable[bool]]


class BatchRunner:
    """Runs the steps of one aggregation batch inside an open snapshot."""

    def __init__(self, session: AsyncSession, is_cancelled: Optional[CancellationProbe] = None,
                 step_timeout: Optional[float] = None):
        self.session = session
        self.is_cancelled = is_cancelled
        self.step_timeout = step_timeout if step_timeout is not None else settings.QUERY_STEP_TIMEOUT_SECONDS
        self.steps: List[str] = []

    async def check_cancelled(self, step: str) -> None:
        if self.is_cancelled is not None and await self.is_cancelled():
            raise CancellationError(step)

    async def run(self, step: str, statement: Any) -> List[RowMapping]:
        """Execute one step and return its rows as mappings."""
        await self.check_cancelled(step)

        started = time.perf_counter()
        try:
            result = await asyncio.wait_for(self.session.execute(statement), timeout=self.step_timeout)
            rows = result.mappings().all()
        except asyncio.TimeoutError:
            logger.error(f"Query TIMEOUT step={step} after {self.step_timeout}s")
            raise QueryTimeoutError(step)
        except SQLAlchemyError as e:
            logger.error(f"Query FAILED step={step}: {e}")
            raise StorageError(step=step) from e

        elapsed_ms = (time.perf_counter() - started) * 1000
        self.steps.append(step)
        logger.info(f"Query DONE step={step} elapsed_ms={elapsed_ms:.1f} rows={len(rows)}")
        return rows


def snapshot_options(dialect_name: str) -> Dict[str, Any]:
    """Connection options of a snapshot: configured isolation, read only where the driver takes it as an option."""
    options: Dict[str, Any] = {"isolation_level": settings.DB_SNAPSHOT_ISOLATION_LEVEL}
    if dialect_name == "postgresql":
        options["postgresql_readonly"] = True
    return options


@asynccontextmanager
async def read_snapshot(session: AsyncSession,
                        is_cancelled: Optional[CancellationProbe] = None) -> AsyncIterator[BatchRunner]:
    """
    Open one read-only transaction at the configured isolation level and
    yield a BatchRunner bound to it.

    Every step of the batch sees the same snapshot. Any failure, including a
    cancellation, rolls the transaction back before the error propagates.
    """
    # Earlier reads on this session (identity lookup) leave an implicit
    # transaction open; the snapshot needs a fresh one.
    if session.in_transaction():
        await session.commit()

    runner = BatchRunner(session, is_cancelled)
    started = time.perf_counter()
    try:
        async with session.begin():
            dialect_name = session.get_bind().dialect.name
            connection = await session.connection(execution_options=snapshot_options(dialect_name))
            if dialect_name == "mysql":
                # Applies to the transaction opened by the first step
                await connection.exec_driver_sql("SET TRANSACTION READ ONLY")
            yield runner
    except CancellationError as e:
        logger.debug(f"Snapshot cancelled at step={e.step}, rolled back")
        raise
    except asyncio.CancelledError:
        logger.debug("Snapshot task cancelled, rolled back")
        raise
    except StorageError:
        raise
    except SQLAlchemyError as e:
        # begin/commit failures
        logger.error(f"Snapshot transaction failed: {e}")
        raise StorageError(step="transaction") from e

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"Snapshot DONE steps={len(runner.steps)} elapsed_ms={elapsed_ms:.1f}")
