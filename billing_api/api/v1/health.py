from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from billing_api.api import deps
from billing_api.config import settings
from billing_api.db.calls import run_db_call
from billing_api.db.models.tariff_link import AccountTariffLink
from billing_api.schemas.common import ErrorEnvelope

router = APIRouter()

_STARTED_AT = time.monotonic()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check(request: Request):
    return {
        "status": "ok",
        "version": request.app.version,
        "environment": (settings.ENV or "").strip() or "dev",
        "uptime_seconds": int(time.monotonic() - _STARTED_AT),
        "timestamp": _now_iso(),
    }


@router.get("/healthz")
async def healthz_check():
    return {"status": "ok"}


@router.get(
    "/health/db",
    responses={503: {"model": ErrorEnvelope}, 504: {"model": ErrorEnvelope}},
)
async def health_db_check(db: AsyncSession = Depends(deps.get_db)):
    """Reachability of the database and of the tariff link table.

    Failures come back as the usual E004/E007 envelopes.
    """

    async def _count_links() -> int:
        return int((await db.execute(select(func.count()).select_from(AccountTariffLink))).scalar_one())

    started = time.perf_counter()
    links = await run_db_call(
        db, "health.db", _count_links, timeout_seconds=settings.DB_OPERATION_TIMEOUT_SECONDS
    )
    return {
        "status": "ok",
        "db": {
            "dialect": db.bind.dialect.name,
            "latency_ms": round((time.perf_counter() - started) * 1000.0, 2),
            "tariff_links": links,
        },
        "timestamp": _now_iso(),
    }
