"""
Translation of SQLAlchemy failures into record store exceptions.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)

from accueil.domain.exceptions.store import (
    ConstraintViolationError,
    DuplicateKeyError,
    RecordStoreUnavailableError,
)
from accueil.infrastructure.monitoring.metrics import (
    record_store_operations_total,
)

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """
    Check whether an IntegrityError is a primary/unique key violation.

    asyncpg exposes the SQLSTATE, SQLite only the message.
    """
    orig = error.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == UNIQUE_VIOLATION_SQLSTATE:
        return True

    return "UNIQUE constraint failed" in str(orig)


@asynccontextmanager
async def translate_store_errors(
    table: str,
    key: str,
    operation: str,
) -> AsyncGenerator[None, None]:
    """
    Map driver exceptions raised inside the block to domain exceptions.

    Args:
        table: Table being written or read
        key: Key of the row (for error messages)
        operation: Operation name for metrics
    """
    try:
        yield
    except IntegrityError as e:
        if is_unique_violation(e):
            record_store_operations_total.labels(
                operation=operation, status="duplicate"
            ).inc()
            raise DuplicateKeyError(table=table, key=key) from e

        record_store_operations_total.labels(
            operation=operation, status="constraint"
        ).inc()
        raise ConstraintViolationError(table=table, reason=str(e.orig)) from e
    except (OperationalError, InterfaceError) as e:
        record_store_operations_total.labels(
            operation=operation, status="unavailable"
        ).inc()
        raise RecordStoreUnavailableError(operation, str(e.orig)) from e
    except DBAPIError as e:
        if e.connection_invalidated:
            record_store_operations_total.labels(
                operation=operation, status="unavailable"
            ).inc()
            raise RecordStoreUnavailableError(operation, "connection lost") from e

        # DataError and friends: the row itself was rejected
        record_store_operations_total.labels(
            operation=operation, status="constraint"
        ).inc()
        raise ConstraintViolationError(table=table, reason=str(e.orig)) from e
    except (asyncio.TimeoutError, OSError) as e:
        record_store_operations_total.labels(
            operation=operation, status="unavailable"
        ).inc()
        raise RecordStoreUnavailableError(operation, repr(e)) from e
    else:
        record_store_operations_total.labels(
            operation=operation, status="success"
        ).inc()
