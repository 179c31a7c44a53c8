from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from hub_status.core.config import Settings, get_settings
from hub_status.services.anthropic_admin_client import AnthropicAdminClient, AnthropicAdminError
from hub_status.services.status_store import StatusStore
from hub_status.services.usage_reports import (
    CLAUDE_CODE_REPORT,
    FallbackPolicy,
    ReportPeriod,
    UsageReport,
    build_summary,
    reduce_records,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _epoch_ms(value: datetime) -> int:
    return int(_as_utc(value).timestamp() * 1000)


class UsageFetcher:
    """Fetch one usage report, reduce it and overwrite the summary at ``status_path``."""

    def __init__(
        self,
        client: AnthropicAdminClient,
        store: StatusStore,
        *,
        report: UsageReport = CLAUDE_CODE_REPORT,
        status_path: str = "hub_status/token_usage/claude",
        clock: Clock = _utcnow,
    ):
        self.client = client
        self.store = store
        self.report = report
        self.status_path = status_path
        self.clock = clock

    def _load(self, period: ReportPeriod) -> list[dict[str, Any]]:
        return self.client.get_usage_report(self.report.endpoint, self.report.query_params(period))

    def _load_previous_day(self, period: ReportPeriod) -> tuple[list[dict[str, Any]], ReportPeriod]:
        fallback = period.previous_day()
        logger.info("No %s usage for %s yet, trying %s", self.report.name, period.label, fallback.label)
        try:
            records = self._load(fallback)
        except AnthropicAdminError as exc:
            logger.warning("fallback %s usage fetch for %s failed: %s", self.report.name, fallback.label, exc)
            return [], period
        logger.info("Records returned for %s: %d", fallback.label, len(records))
        return records, fallback

    def fetch(self) -> dict[str, Any]:
        period = ReportPeriod.current(self.report.window, _as_utc(self.clock()))
        logger.info("Fetching %s usage for %s", self.report.name, period.label)

        records = self._load(period)
        logger.info("Records returned for %s: %d", period.label, len(records))

        if not records and self.report.fallback is FallbackPolicy.PREVIOUS_DAY:
            records, period = self._load_previous_day(period)

        totals = reduce_records(records, self.report)
        logger.info("Aggregated %s usage for %s: %s", self.report.name, period.label, totals)

        summary = build_summary(self.report, totals, period, last_updated=_epoch_ms(self.clock()))
        self.store.set(self.status_path, summary)
        return summary


def fetch_usage(
    credential: str | None,
    *,
    store: StatusStore,
    http_client: httpx.Client | None = None,
    report: UsageReport = CLAUDE_CODE_REPORT,
    settings: Settings | None = None,
    clock: Clock = _utcnow,
) -> dict[str, Any]:
    settings = settings or get_settings()
    client = AnthropicAdminClient(
        api_key=credential or "",
        base_url=settings.anthropic_base_url,
        version=settings.anthropic_version,
        timeout=settings.anthropic_timeout_seconds,
        http=http_client,
    )
    fetcher = UsageFetcher(
        client,
        store,
        report=report,
        status_path=settings.usage_status_path,
        clock=clock,
    )
    return fetcher.fetch()
