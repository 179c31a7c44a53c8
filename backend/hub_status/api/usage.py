from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from hub_status.core.config import Settings, get_settings
from hub_status.core.database import get_db
from hub_status.schemas.usage import StoredUsageResponse, UsageRefreshResponse
from hub_status.services.anthropic_admin_client import (
    AnthropicAdminClient,
    AnthropicAdminError,
    AnthropicAPIError,
    AnthropicConfigError,
    build_admin_client,
)
from hub_status.services.status_store import StatusStore
from hub_status.services.usage_reports import get_report
from hub_status.services.usage_service import UsageFetcher

router = APIRouter(prefix="/usage", tags=["usage"])


def get_admin_client(settings: Settings = Depends(get_settings)) -> AnthropicAdminClient:
    return build_admin_client(settings)


@router.post("/refresh", response_model=UsageRefreshResponse)
def refresh(
    report: str | None = Query(default=None),
    db: Session = Depends(get_db),
    client: AnthropicAdminClient = Depends(get_admin_client),
    settings: Settings = Depends(get_settings),
) -> UsageRefreshResponse:
    try:
        usage_report = get_report(report or settings.usage_report)
    except KeyError as exc:
        raise HTTPException(status_code=400, detail=exc.args[0]) from exc

    fetcher = UsageFetcher(client, StatusStore(db), report=usage_report, status_path=settings.usage_status_path)
    try:
        summary = fetcher.fetch()
    except AnthropicConfigError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except AnthropicAPIError as exc:
        raise HTTPException(
            status_code=502,
            detail={"message": str(exc), "upstream_status": exc.status_code, "body": exc.body[:500]},
        ) from exc
    except AnthropicAdminError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return UsageRefreshResponse(success=True, data=summary)


@router.get("", response_model=StoredUsageResponse)
def get_usage(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)) -> StoredUsageResponse:
    value = StatusStore(db).get(settings.usage_status_path)
    if value is None:
        raise HTTPException(status_code=404, detail="no usage summary stored yet")
    return StoredUsageResponse(path=settings.usage_status_path, data=value)
