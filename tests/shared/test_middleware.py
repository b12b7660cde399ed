from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from shared.observability import middleware as middleware_module
from shared.observability.middleware import CorrelationIdMiddleware, RequestTimingMiddleware


class _BoundLogger:
    def __init__(self) -> None:
        self.context: dict[str, Any] = {}
        self.events: list[tuple[str, str]] = []

    def bind(self, **kwargs: Any) -> "_BoundLogger":
        self.context.update(kwargs)
        return self

    def info(self, event: str, **kwargs: Any) -> None:
        self.events.append(("info", event))

    def error(self, event: str, **kwargs: Any) -> None:
        self.events.append(("error", event))

    def exception(self, event: str, **kwargs: Any) -> None:
        self.events.append(("exception", event))


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def http_logger(monkeypatch: pytest.MonkeyPatch) -> _BoundLogger:
    recorder = _BoundLogger()
    monkeypatch.setattr(middleware_module, "get_logger", lambda name=None: recorder)
    return recorder


def _build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    @app.get("/ok")
    async def ok() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("kaboom")

    return app


@pytest.mark.anyio("asyncio")
async def test_completed_request_is_logged_with_timing(http_logger: _BoundLogger) -> None:
    async with AsyncClient(
        transport=ASGITransport(app=_build_app()), base_url="http://test"
    ) as client:
        response = await client.get("/ok", headers={"X-Request-ID": "abc"})

    assert response.headers["X-Request-ID"] == "abc"
    assert response.headers["X-Correlation-ID"] == "abc"
    assert response.headers["X-Response-Time"].endswith("s")
    assert http_logger.events == [("info", "http_request_completed")]
    assert http_logger.context["status_code"] == 200


@pytest.mark.anyio("asyncio")
async def test_failed_request_is_logged_once_without_traceback(
    http_logger: _BoundLogger,
) -> None:
    async with AsyncClient(
        transport=ASGITransport(app=_build_app(), raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        response = await client.get("/boom")

    assert response.status_code == 500
    assert http_logger.events == [("error", "http_request_failed")]
    assert http_logger.context["path"] == "/boom"
