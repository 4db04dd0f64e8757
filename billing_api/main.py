from __future__ import annotations

from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from billing_api.api.router import api_router
from billing_api.config import settings
from billing_api.db.session import engine
from billing_api.utils.error_codes import ERROR_MESSAGES, ErrorCode
from billing_api.utils.exceptions import BillingException
from billing_api.utils.observability import configure_logging
from billing_api.utils.request_id import (
    REQUEST_ID_HEADER,
    new_request_id,
    request_id_var,
    validate_request_id,
)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    logger.info("lifespan.startup env=%s db=%s", settings.ENV, engine.url.get_backend_name())
    try:
        yield
    finally:
        try:
            await engine.dispose()
        except Exception:
            logger.exception("lifespan.engine_dispose_failed")


app = FastAPI(title="Billing API", version="1.0.0", debug=settings.DEBUG, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    rid = validate_request_id(request.headers.get(REQUEST_ID_HEADER)) or new_request_id()
    token = request_id_var.set(rid)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)

    response.headers[REQUEST_ID_HEADER] = rid
    return response


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    if not getattr(settings, "METRICS_ENABLED", True):
        return await call_next(request)

    start = time.perf_counter()
    response = await call_next(request)
    elapsed_s = time.perf_counter() - start

    try:
        from billing_api.utils.metrics import HTTP_REQUESTS_TOTAL, HTTP_REQUEST_DURATION_SECONDS

        route = request.scope.get("route")
        # IMPORTANT: keep Prometheus label cardinality low.
        # - Matched routes: use the route template (e.g. "/api/v1/tariff-links/{id}").
        # - Unmatched routes: use a fixed label.
        route_path = getattr(route, "path", None)
        if isinstance(route_path, str) and route_path:
            path_label = route_path
        else:
            path_label = "__unmatched__"
        method = request.method
        status = str(getattr(response, "status_code", 0))

        HTTP_REQUESTS_TOTAL.labels(method=method, path=path_label, status=status).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, path=path_label).observe(elapsed_s)
    except Exception:
        pass

    return response


@app.exception_handler(BillingException)
async def billing_exception_handler(request: Request, exc: BillingException):
    if exc.status_code >= 500:
        logger.error(
            "request.failed method=%s path=%s status=%s code=%s message=%s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.code,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
):
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": ErrorCode.E009.value,
                "message": ERROR_MESSAGES[ErrorCode.E009],
                "details": {"errors": jsonable_encoder(exc.errors())},
            }
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("request.crashed method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=BillingException().to_dict(),
        headers={"Connection": "close"},
    )


app.include_router(api_router, prefix="/api/v1")


if getattr(settings, "METRICS_ENABLED", True):

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        from billing_api.utils.metrics import render_metrics

        payload, content_type = render_metrics()
        return Response(content=payload, media_type=content_type)
