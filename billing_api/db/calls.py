"""Bounded, translated database calls.

Every service that touches the database goes through `run_db_call`, so a caller
only ever sees API exceptions: a deadline miss becomes TimeoutException, a lost
or locked database becomes ServiceUnavailableException, a value the column
cannot hold becomes BadRequestException and anything else SQLAlchemy raises
becomes a plain 500. The session is rolled back on each of those paths, so a
transient result never leaves a half-applied write behind.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import DataError, DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from billing_api.utils.exceptions import (
    BadRequestException,
    BillingException,
    ServiceUnavailableException,
    TimeoutException,
)
from billing_api.utils.observability import log_duration

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 3.0


async def rollback_quietly(session: AsyncSession, operation: str) -> None:
    try:
        await session.rollback()
    except Exception:
        # Surface the first failure, not this one.
        logger.warning("db.rollback_failed op=%s", operation, exc_info=True)


async def run_db_call(
    session: AsyncSession,
    operation: str,
    fn: Callable[[], Awaitable[T]],
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    **fields: object,
) -> T:
    try:
        with log_duration(logger, f"db.{operation}", **fields):
            return await asyncio.wait_for(fn(), timeout=timeout_seconds)
    except (BillingException, StaleDataError):
        raise
    except asyncio.TimeoutError as exc:
        await rollback_quietly(session, operation)
        logger.warning(
            "db.timeout op=%s timeout_s=%s %s",
            operation,
            timeout_seconds,
            " ".join(f"{k}={v}" for k, v in fields.items()),
        )
        raise TimeoutException(
            "Storage operation timed out",
            details={"operation": operation, "timeout_seconds": timeout_seconds},
        ) from exc
    except (OperationalError, DisconnectionError) as exc:
        await rollback_quietly(session, operation)
        logger.warning("db.unavailable op=%s error=%s", operation, exc)
        raise ServiceUnavailableException(details={"operation": operation}) from exc
    except (OverflowError, DataError) as exc:
        # Drivers raise OverflowError before the statement is sent.
        await rollback_quietly(session, operation)
        logger.info("db.value_out_of_range op=%s error=%s", operation, exc)
        raise BadRequestException(
            "Value out of range for storage", details={"operation": operation}
        ) from exc
    except SQLAlchemyError as exc:
        await rollback_quietly(session, operation)
        logger.exception("db.error op=%s", operation)
        raise BillingException("Storage error", details={"operation": operation}) from exc
