from __future__ import annotations

import argparse
import json
import logging

from hub_status.core.config import get_settings
from hub_status.core.database import SessionLocal, init_db
from hub_status.services.status_store import StatusStore
from hub_status.services.usage_reports import REPORTS, get_report
from hub_status.services.usage_service import fetch_usage

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Fetch Anthropic usage and store the summary.")
    parser.add_argument("--report", choices=sorted(REPORTS), default=settings.usage_report)
    args = parser.parse_args()

    init_db()
    db = SessionLocal()
    try:
        result = fetch_usage(
            settings.anthropic_admin_key,
            store=StatusStore(db),
            report=get_report(args.report),
            settings=settings,
        )
        print(json.dumps({"success": True, "data": result}, indent=2))
    finally:
        db.close()


if __name__ == "__main__":
    main()
