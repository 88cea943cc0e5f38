"""S3 archive of daily reports."""

import json
from datetime import date
from functools import lru_cache
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError
from pydantic import ValidationError

from .config import settings
from .logging_utils import setup_logger
from .models import DailyReport

logger = setup_logger(__name__)


@lru_cache(maxsize=1)
def get_s3_client():
    """Shared S3 client, created on first use."""
    return boto3.client("s3")


def archive_enabled() -> bool:
    return bool(settings.REPORTS_BUCKET_NAME)


def _get_bucket_name() -> str:
    """Get the report bucket name.

    Raises:
        ValueError: If REPORTS_BUCKET_NAME is not set.
    """
    if not settings.REPORTS_BUCKET_NAME:
        raise ValueError("REPORTS_BUCKET_NAME must be set in environment variables")
    return settings.REPORTS_BUCKET_NAME


def get_report_key(pet_id: str, date_obj: date, suffix: str = ".json") -> str:
    """S3 key for a tracker's report: ``pet_id/YYYY-MM-DD.json``."""
    return f"{pet_id}/{date_obj.strftime('%Y-%m-%d')}{suffix}"


def save_report(report: DailyReport, metadata: Optional[Dict[str, str]] = None) -> str:
    """Upload a report as JSON.

    Args:
        report: Report to archive.
        metadata: Optional object metadata.

    Returns:
        S3 object key.

    Raises:
        ClientError: If the upload fails.
        ValueError: If the bucket name is not set.
    """
    bucket = _get_bucket_name()
    key = get_report_key(report.pet_id, report.report_date)

    extra_args: Dict[str, Any] = {}
    if metadata:
        extra_args["Metadata"] = {k: str(v) for k, v in metadata.items()}

    try:
        get_s3_client().put_object(
            Bucket=bucket,
            Key=key,
            Body=json.dumps(report.to_json_dict(), ensure_ascii=False, indent=2),
            ContentType="application/json",
            **extra_args,
        )
    except ClientError as e:
        logger.error(f"Failed to upload report to S3: {e}")
        raise

    logger.info(f"Uploaded report to s3://{bucket}/{key}")
    return key


def load_report(pet_id: str, date_obj: date) -> Optional[DailyReport]:
    """Download an archived report.

    Returns:
        The report, or None if it does not exist or cannot be read.

    Raises:
        ValueError: If the bucket name is not set.
    """
    bucket = _get_bucket_name()
    key = get_report_key(pet_id, date_obj)

    try:
        response = get_s3_client().get_object(Bucket=bucket, Key=key)
        body = response["Body"].read().decode("utf-8")
    except ClientError as e:
        if e.response["Error"]["Code"] == "NoSuchKey":
            logger.debug(f"Report not found in S3: s3://{bucket}/{key}")
        else:
            logger.error(f"Failed to download report from S3: {e}")
        return None

    try:
        return DailyReport.model_validate_json(body)
    except ValidationError as e:
        logger.error(f"Archived report s3://{bucket}/{key} is invalid: {e}")
        return None
