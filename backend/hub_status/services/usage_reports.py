"""Usage report shapes and the reducer shared by every report.

A report describes where its rows come from (``endpoint`` plus fixed query
parameters), which time window it covers, how to pull numbers out of each row
and what to do when the current window is still empty. ``reduce_records``
runs the same loop for every report; only the field maps differ.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable, Mapping

Number = int | float
KeyPath = tuple[str, ...]
FieldMap = Mapping[str, tuple[KeyPath, ...]]


class FallbackPolicy(str, Enum):
    NONE = "none"
    PREVIOUS_DAY = "previous_day"


class ReportWindow(str, Enum):
    DAY = "day"
    MONTH_TO_DATE = "month_to_date"


def safe_number(obj: Any, *keys: str) -> Number:
    """Return the number found by walking ``keys`` into nested mappings.

    Total over any input: a missing key, a non-mapping along the way, ``None``,
    booleans, strings and non-finite floats all yield ``0``.
    """
    value = obj
    for key in keys:
        if not isinstance(value, Mapping):
            return 0
        value = value.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return value


def isoformat_z(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class ReportPeriod:
    window: ReportWindow
    start: datetime
    end: datetime

    @classmethod
    def current(cls, window: ReportWindow, now: datetime) -> ReportPeriod:
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if window is ReportWindow.MONTH_TO_DATE:
            return cls(window, midnight.replace(day=1), now)
        return cls(window, midnight, now)

    def previous_day(self) -> ReportPeriod:
        start = self.start - timedelta(days=1)
        return ReportPeriod(self.window, start, self.start)

    @property
    def label(self) -> str:
        if self.window is ReportWindow.DAY:
            return self.start.date().isoformat()
        return f"{isoformat_z(self.start)}..{isoformat_z(self.end)}"

    def query_params(self) -> list[tuple[str, str]]:
        if self.window is ReportWindow.DAY:
            return [("starting_at", self.start.date().isoformat())]
        return [("starting_at", isoformat_z(self.start)), ("ending_at", isoformat_z(self.end))]

    def marker(self) -> dict[str, str]:
        if self.window is ReportWindow.DAY:
            return {"date": self.start.date().isoformat()}
        return {"starting_at": isoformat_z(self.start), "ending_at": isoformat_z(self.end)}


@dataclass(frozen=True)
class UsageReport:
    name: str
    endpoint: str
    window: ReportWindow
    fallback: FallbackPolicy
    item_key: str
    item_fields: FieldMap
    record_fields: FieldMap = field(default_factory=dict)
    base_params: tuple[tuple[str, str | int], ...] = ()
    limits: Mapping[str, int] = field(default_factory=dict)

    @property
    def total_keys(self) -> list[str]:
        return [*self.item_fields, *self.record_fields]

    def query_params(self, period: ReportPeriod) -> list[tuple[str, str | int]]:
        return [*period.query_params(), *self.base_params]


CLAUDE_CODE_REPORT = UsageReport(
    name="claude_code",
    endpoint="claude_code",
    window=ReportWindow.DAY,
    fallback=FallbackPolicy.PREVIOUS_DAY,
    item_key="model_breakdown",
    item_fields={
        "input_tokens": (("tokens", "input"),),
        "output_tokens": (("tokens", "output"),),
        "cache_read_tokens": (("tokens", "cache_read"),),
        "cache_creation_tokens": (("tokens", "cache_creation"),),
        "estimated_cost_cents": (("estimated_cost", "amount"),),
    },
    record_fields={
        "sessions": (("core_metrics", "num_sessions"),),
        "lines_added": (("core_metrics", "lines_of_code", "added"),),
        "lines_removed": (("core_metrics", "lines_of_code", "removed"),),
        "commits": (("core_metrics", "commits_by_claude_code"),),
        "pull_requests": (("core_metrics", "pull_requests_by_claude_code"),),
    },
    base_params=(("limit", 1000),),
    # Gauge thresholds for the status display, not derived from the API.
    limits={"daily_input": 700_000, "daily_output": 300_000},
)

MESSAGES_REPORT = UsageReport(
    name="messages",
    endpoint="messages",
    window=ReportWindow.MONTH_TO_DATE,
    fallback=FallbackPolicy.NONE,
    item_key="results",
    item_fields={
        "input_tokens": (("uncached_input_tokens",), ("cache_read_input_tokens",)),
        "output_tokens": (("output_tokens",),),
    },
    base_params=(("bucket_width", "1d"), ("group_by[]", "model")),
    limits={"monthly_input": 20_000_000, "monthly_output": 5_000_000},
)

REPORTS: dict[str, UsageReport] = {report.name: report for report in (CLAUDE_CODE_REPORT, MESSAGES_REPORT)}


def get_report(name: str) -> UsageReport:
    try:
        return REPORTS[name]
    except KeyError:
        raise KeyError(f"unknown usage report: {name}") from None


def _accumulate(totals: dict[str, Number], row: Any, fields: FieldMap) -> None:
    for key, paths in fields.items():
        for path in paths:
            totals[key] += safe_number(row, *path)


def reduce_records(records: Iterable[Any], report: UsageReport) -> dict[str, Number]:
    totals: dict[str, Number] = {key: 0 for key in report.total_keys}
    for record in records:
        _accumulate(totals, record, report.record_fields)
        items = record.get(report.item_key) if isinstance(record, Mapping) else None
        if not isinstance(items, list):
            continue
        for item in items:
            _accumulate(totals, item, report.item_fields)
    return totals


def build_summary(
    report: UsageReport,
    totals: Mapping[str, Number],
    period: ReportPeriod,
    *,
    last_updated: int,
) -> dict[str, Any]:
    return {
        **totals,
        **period.marker(),
        "last_updated": last_updated,
        "limits": dict(report.limits),
    }
