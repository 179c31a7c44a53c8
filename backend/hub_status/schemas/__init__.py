from hub_status.schemas.usage import (
    ClaudeCodeUsageSummary,
    MessagesUsageSummary,
    StoredUsageResponse,
    UsageRefreshResponse,
)

__all__ = [
    "ClaudeCodeUsageSummary",
    "MessagesUsageSummary",
    "StoredUsageResponse",
    "UsageRefreshResponse",
]
