from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import httpx

from hub_status.core.config import Settings

QueryParams = Sequence[tuple[str, str | int]]


class AnthropicAdminError(RuntimeError):
    pass


class AnthropicConfigError(AnthropicAdminError):
    pass


class AnthropicAPIError(AnthropicAdminError):
    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Anthropic API error {status_code}: {body[:500]}")


@dataclass
class AnthropicAdminClient:
    api_key: str
    base_url: str = "https://api.anthropic.com"
    version: str = "2023-06-01"
    timeout: float = 20.0
    http: httpx.Client | None = None

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": (self.api_key or "").strip(),
            "anthropic-version": self.version,
            "Accept": "application/json",
        }

    def _send(self, url: str, params: QueryParams) -> httpx.Response:
        if self.http is not None:
            return self.http.get(url, headers=self._headers(), params=list(params))
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(url, headers=self._headers(), params=list(params))

    def _request(self, path: str, *, params: QueryParams) -> Any:
        if not (self.api_key or "").strip():
            raise AnthropicConfigError("ANTHROPIC_ADMIN_KEY not configured")

        url = f"{self.base_url.rstrip('/')}{path}"
        try:
            response = self._send(url, params)
        except httpx.RequestError as exc:
            raise AnthropicAdminError(f"Anthropic request failed: {exc}") from exc

        if not response.is_success:
            raise AnthropicAPIError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise AnthropicAdminError(f"Anthropic API returned a malformed body: {response.text[:200]}") from exc

    def get_usage_report(self, endpoint: str, params: QueryParams) -> list[dict[str, Any]]:
        """Fetch one page of an organization usage report and return its ``data`` rows."""
        body = self._request(f"/v1/organizations/usage_report/{endpoint}", params=params)
        rows = body.get("data") if isinstance(body, dict) else None
        if not isinstance(rows, list):
            return []
        return [row for row in rows if isinstance(row, dict)]


def build_admin_client(settings: Settings, http: httpx.Client | None = None) -> AnthropicAdminClient:
    return AnthropicAdminClient(
        api_key=settings.anthropic_admin_key,
        base_url=settings.anthropic_base_url,
        version=settings.anthropic_version,
        timeout=settings.anthropic_timeout_seconds,
        http=http,
    )
