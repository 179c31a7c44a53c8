from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hub_status.core.database import Base
from hub_status.models import entities  # noqa: F401

FIXED_NOW = datetime(2026, 10, 17, 15, 30, 0, tzinfo=timezone.utc)


class UpstreamStub:
    """Serves queued responses to an httpx client and records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._queue: list[Any] = []

    def reply(self, status_code: int = 200, *, json: Any = None, text: str | None = None) -> UpstreamStub:
        if text is not None:
            self._queue.append(httpx.Response(status_code, text=text))
        else:
            self._queue.append(httpx.Response(status_code, json=json))
        return self

    def fail(self, message: str = "connection refused") -> UpstreamStub:
        self._queue.append(message)
        return self

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._queue:
            raise AssertionError(f"unexpected upstream request: {request.url}")
        item = self._queue.pop(0)
        if isinstance(item, str):
            raise httpx.ConnectError(item, request=request)
        return item

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self._handle))


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False, expire_on_commit=False)
    db = factory()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()
