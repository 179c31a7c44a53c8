from __future__ import annotations

from copy import deepcopy
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from hub_status.models.entities import StatusNode


def normalize_path(path: str) -> str:
    parts = [part.strip() for part in (path or "").split("/") if part.strip()]
    if not parts:
        raise ValueError("status path must not be empty")
    return "/".join(parts)


class StatusStore:
    """Path-addressed JSON values. Writes overwrite; nothing is merged or kept."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, path: str) -> StatusNode | None:
        return self.db.execute(select(StatusNode).where(StatusNode.path == path)).scalar_one_or_none()

    def get(self, path: str) -> dict[str, Any] | None:
        record = self._find(normalize_path(path))
        if record is None:
            return None
        return deepcopy(record.value)

    def set(self, path: str, value: dict[str, Any]) -> dict[str, Any]:
        key = normalize_path(path)
        record = self._find(key)
        if record is None:
            record = StatusNode(path=key, value=deepcopy(value))
        else:
            record.value = deepcopy(value)
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record.value
