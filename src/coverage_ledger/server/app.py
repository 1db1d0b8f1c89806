"""Starlette ASGI application exposing check, save, history, chart and badge."""

from __future__ import annotations

import contextlib
import json
import time
from typing import AsyncIterator, Optional

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from ..comparator import Comparator
from ..config import ServiceConfig
from ..exceptions import NotFoundError, StorageUnavailableError, ValidationError
from ..logging_config import get_logger
from ..rendering import render_coverage_badge, render_trend_chart
from ..trend import build_trend_series
from ..validation import parse_submission
from .serializers import snapshot_to_dict
from .state import LedgerHandle

logger = get_logger(__name__)
access_logger = get_logger("coverage_ledger.access")


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One log line per request: method, path, status, duration."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        access_logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


async def _validation_error(request: Request, exc: ValidationError) -> Response:
    logger.debug("Rejected request to %s: %s", request.url.path, exc)
    return PlainTextResponse(exc.message, status_code=400)


async def _not_found(request: Request, exc: NotFoundError) -> Response:
    return PlainTextResponse(exc.message, status_code=404)


async def _storage_unavailable(request: Request, exc: StorageUnavailableError) -> Response:
    logger.error("Storage failure on %s: %s", request.url.path, exc)
    return PlainTextResponse(exc.reason, status_code=500)


def create_app(config: Optional[ServiceConfig] = None, handle: Optional[LedgerHandle] = None) -> Starlette:
    """Build the Starlette application.

    Args:
        config: Service configuration (defaults apply when omitted)
        handle: Shared ledger handle. Created from ``config.db_path`` when
            omitted. It is opened during startup, before any request is
            served, and closed at shutdown if this app opened it.
    """
    config = config or ServiceConfig()
    handle = handle or LedgerHandle(config.db_path)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        opened_here = not handle.is_open
        handle.open()
        try:
            yield
        finally:
            if opened_here:
                handle.close()

    def _key(request: Request) -> tuple[str, str, str]:
        params = request.path_params
        return params["project_name"], params["branch"], params["test_name"]

    async def homepage(request: Request) -> Response:
        return PlainTextResponse("Ok")

    async def list_projects(request: Request) -> Response:
        return JSONResponse(handle.ledger.distinct_projects())

    async def list_branches(request: Request) -> Response:
        project_name = request.path_params["project_name"]
        branches = handle.ledger.distinct_branches(project_name)
        if not branches:
            raise NotFoundError(project_name)
        return JSONResponse(branches)

    async def list_tests(request: Request) -> Response:
        project_name = request.path_params["project_name"]
        branch = request.path_params["branch"]
        tests = handle.ledger.distinct_tests(project_name, branch)
        if not tests:
            raise NotFoundError(project_name, branch)
        return JSONResponse(tests)

    async def history(request: Request) -> Response:
        project_name, branch, test_name = _key(request)
        snapshots = handle.ledger.all_for_key(project_name, branch, test_name, order="asc")
        if not snapshots:
            raise NotFoundError(project_name, branch, test_name)
        return JSONResponse([snapshot_to_dict(s) for s in snapshots])

    async def check(request: Request) -> Response:
        """Dry-run evaluation. 200 when accepted, 409 when rejected."""
        project_name, branch, test_name = _key(request)
        submission = parse_submission(request.query_params)
        verdict = Comparator(handle.ledger).evaluate(
            project_name, branch, test_name, submission.base_branch, submission.counts
        )
        status = 200 if verdict.accepted else 409
        return PlainTextResponse(verdict.message, status_code=status)

    async def save(request: Request) -> Response:
        project_name, branch, test_name = _key(request)
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        submission = parse_submission(body)
        snapshot_id = handle.ledger.append(
            project_name,
            branch,
            test_name,
            submission.base_branch,
            submission.counts,
            ref=submission.ref,
        )
        logger.info(
            "Saved %s/%s/%s as snapshot %d (%s%%)",
            project_name,
            branch,
            test_name,
            snapshot_id,
            submission.counts.coverage_percent,
        )
        return PlainTextResponse("Saved")

    async def chart(request: Request) -> Response:
        """PNG trend chart. Unknown keys render an empty chart rather than 404."""
        project_name, branch, test_name = _key(request)
        series = build_trend_series(
            handle.ledger,
            project_name,
            branch,
            test_name,
            backfill_limit=config.trend_backfill_limit,
        )
        try:
            png = await run_in_threadpool(
                render_trend_chart, series, config.chart_width, config.chart_height
            )
        except Exception as e:
            logger.error("Chart rendering failed for %s/%s/%s: %s", project_name, branch, test_name, e)
            return PlainTextResponse(str(e), status_code=500)
        return Response(png, media_type="image/png")

    async def badge(request: Request) -> Response:
        project_name, branch, test_name = _key(request)
        latest = handle.ledger.latest(project_name, branch, test_name)
        percent = latest.coverage_percent if latest is not None else None
        svg = render_coverage_badge(percent, label=config.badge_label)
        return Response(
            svg,
            media_type="image/svg+xml",
            headers={"Cache-Control": "no-cache"},
        )

    prefix = "/coverage/{project_name}/{branch}/{test_name}"
    routes = [
        Route("/", homepage),
        Route("/coverage", list_projects),
        Route("/coverage/{project_name}", list_branches),
        Route("/coverage/{project_name}/{branch}", list_tests),
        Route(prefix, history),
        Route(f"{prefix}/check", check),
        Route(f"{prefix}/save", save, methods=["POST"]),
        Route(f"{prefix}/chart", chart),
        Route(f"{prefix}/badge", badge),
    ]

    middleware = [Middleware(AccessLogMiddleware)] if config.access_log else []

    return Starlette(
        routes=routes,
        middleware=middleware,
        lifespan=lifespan,
        exception_handlers={
            ValidationError: _validation_error,
            NotFoundError: _not_found,
            StorageUnavailableError: _storage_unavailable,
        },
    )
