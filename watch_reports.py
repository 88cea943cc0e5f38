#!/usr/bin/env python3
"""Poll the store for one tracker and log each report.

Usage: python watch_reports.py [pet_id] [interval_seconds]
"""

import sys

from pet_health.config import settings
from pet_health.logging_utils import setup_logger
from pet_health.models import ReportResult
from pet_health.orchestrator import build_daily_report
from pet_health.poller import ReportPoller

logger = setup_logger("watch_reports")


def log_report(result: ReportResult) -> None:
    report = result.report
    diagnostic = result.diagnostic
    logger.info(
        f"[{diagnostic.source_kind.value}] tracker {report.pet_id} {report.report_date}: "
        f"{report.activity.steps} steps ({report.activity.active_level.value}), "
        f"{report.vitals.avg_temp}°C ({report.vitals.status.value}), "
        f"device {report.device.data_status.value}, trend {report.trend.trend_label.value}"
    )
    if diagnostic.using_fallback:
        logger.warning(f"Fallback reason: {diagnostic.reason}")


def main():
    pet_id = sys.argv[1] if len(sys.argv) > 1 else settings.pet_roster[0]
    interval = float(sys.argv[2]) if len(sys.argv) > 2 else settings.POLL_INTERVAL_SECONDS

    poller = ReportPoller(build_daily_report, pet_id, interval_seconds=interval, on_report=log_report)
    try:
        poller.run()
    except KeyboardInterrupt:
        poller.stop()
        print("\nStopped.")


if __name__ == "__main__":
    main()
