from __future__ import annotations

from typing import Any

from pydantic import BaseModel

Number = int | float


class ClaudeCodeUsageSummary(BaseModel):
    input_tokens: Number = 0
    output_tokens: Number = 0
    cache_read_tokens: Number = 0
    cache_creation_tokens: Number = 0
    estimated_cost_cents: Number = 0
    sessions: Number = 0
    lines_added: Number = 0
    lines_removed: Number = 0
    commits: Number = 0
    pull_requests: Number = 0
    date: str
    last_updated: int
    limits: dict[str, int]


class MessagesUsageSummary(BaseModel):
    input_tokens: Number = 0
    output_tokens: Number = 0
    starting_at: str
    ending_at: str
    last_updated: int
    limits: dict[str, int]


class UsageRefreshResponse(BaseModel):
    success: bool = True
    data: ClaudeCodeUsageSummary | MessagesUsageSummary


class StoredUsageResponse(BaseModel):
    path: str
    data: dict[str, Any]
