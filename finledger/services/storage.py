import io
import json
import logging
from enum import Enum
from functools import lru_cache
from uuid import UUID
from datetime import datetime, timezone, date
from typing import Type, TypeVar

import boto3
import numpy as np
import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq
from pydantic import BaseModel

from finledger.config import settings
from finledger.models.schemas.audit import AuditLog
from finledger.services.errors import LedgerNotFoundError

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {"password", "hashed_password", "access_token", "refresh_token"}

M = TypeVar("M", bound=BaseModel)


def _singular(record_type: str) -> str:
    if record_type.endswith("ies"):
        return record_type[:-3] + "y"
    return record_type[:-1]


def _label(record_type: str) -> str:
    return _singular(record_type).replace("_", " ").capitalize()


@lru_cache(maxsize=1)
def s3_client():
    return boto3.client("s3", region_name=settings.aws_region)


def _bucket() -> str:
    return settings.s3_bucket


def _list_keys(prefix: str) -> list[str]:
    paginator = s3_client().get_paginator("list_objects_v2")
    keys = []
    for page in paginator.paginate(Bucket=_bucket(), Prefix=prefix):
        keys.extend(obj["Key"] for obj in page.get("Contents", []))
    return keys


def _read_frame(key: str) -> pd.DataFrame:
    obj = s3_client().get_object(Bucket=_bucket(), Key=key)
    return pd.read_parquet(io.BytesIO(obj["Body"].read()))


def _write_frame(key: str, df: pd.DataFrame) -> None:
    table = pa.Table.from_pandas(df, preserve_index=False)
    out_buffer = pa.BufferOutputStream()
    pq.write_table(table, out_buffer)
    s3_client().put_object(Bucket=_bucket(), Key=key, Body=out_buffer.getvalue().to_pybytes())


def mark_old_version_as_stale(record_type: str, record_id, id_column: str) -> None:
    prefix = f"{record_type}/{id_column}={record_id}/"
    keys = _list_keys(prefix)

    if not keys:
        raise LedgerNotFoundError(f"No versions found for {record_type} {record_id}")

    for key in keys:
        df = _read_frame(key)
        if bool(df.get("is_current", pd.Series([True])).iloc[0]):
            df["is_current"] = False
            _write_frame(key, df)


def save_version(record, record_type: str, id_field: str) -> None:
    if isinstance(record, BaseModel):
        record_data = record.model_dump()
    elif isinstance(record, dict):
        record_data = dict(record)
    else:
        raise TypeError(f"Unsupported object type for save_version: {type(record)}")

    # Parquet-friendly scalars
    for k, v in record_data.items():
        if isinstance(v, UUID):
            record_data[k] = str(v)
        elif isinstance(v, Enum):
            record_data[k] = v.value
        elif isinstance(v, datetime):
            record_data[k] = pd.to_datetime(v)

    df = pd.DataFrame([record_data])

    record_id = record_data[id_field]
    now = datetime.now(timezone.utc)
    timestamp = now.strftime("%Y%m%dT%H%M%S%fZ")

    # Hybrid partitioning: id → year → month → day
    key = (
        f"{record_type}/{id_field}={record_id}/"
        f"year={now.year}/month={now.month:02}/day={now.day:02}/"
        f"{_singular(record_type)}-{record_id}-{timestamp}.parquet"
    )
    _write_frame(key, df)


def _empty_df(schema) -> pd.DataFrame:
    return pd.DataFrame(columns=list(schema.model_fields.keys()))


def load_versions(record_type: str, schema, record_id=None, id_field: str | None = None) -> pd.DataFrame:
    """Load every stored version of a record type (or of one record) into a frame."""
    if record_id is not None and id_field:
        prefix = f"{record_type}/{id_field}={record_id}/"
    else:
        prefix = f"{record_type}/"

    keys = _list_keys(prefix)
    if not keys:
        return _empty_df(schema)

    dfs = [_read_frame(key) for key in keys]
    return pd.concat(dfs, ignore_index=True)


def current_rows(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df
    deleted = df["is_deleted"].astype("boolean").fillna(False) if "is_deleted" in df else False
    return df[df["is_current"].astype(bool) & ~deleted]


def to_records(df: pd.DataFrame, schema: Type[M]) -> list[M]:
    """Map frame rows onto pydantic records, turning NaN/NaT into None."""
    if df.empty:
        return []
    clean = df.astype(object).where(pd.notna(df), None)
    records = []
    for row in clean.to_dict(orient="records"):
        records.append(schema(**{k: v.item() if isinstance(v, np.generic) else v for k, v in row.items()}))
    return records


def load_current(record_type: str, schema: Type[M], *, user_id: str | None = None) -> list[M]:
    df = current_rows(load_versions(record_type, schema))
    if user_id is not None and not df.empty:
        df = df[df["user_id"].astype(str) == str(user_id)]
    return to_records(df, schema)


def get_owned(record_type: str, schema: Type[M], id_field: str, record_id, user_id: str) -> M:
    df = current_rows(load_versions(record_type, schema, record_id=record_id, id_field=id_field))
    if not df.empty:
        df = df[df["user_id"].astype(str) == str(user_id)]
    if df.empty:
        raise LedgerNotFoundError(f"{_label(record_type)} not found")
    return to_records(df, schema)[0]


def update_record(record: M, record_type: str, id_field: str) -> M:
    """Supersede the current version of ``record`` with a new one."""
    record_id = getattr(record, id_field)
    mark_old_version_as_stale(record_type, record_id, id_field)
    updated = record.model_copy(update={
        "updated_at": datetime.now(timezone.utc),
        "is_current": True,
        "is_deleted": False,
    })
    save_version(updated, record_type, id_field)
    return updated


def soft_delete_record(record: M, record_type: str, id_field: str, *, user_id: str | None = None) -> dict:
    """
    Generic soft delete helper:
      - marks old versions stale
      - saves a new version with is_deleted=True and is_current=True
    """
    record_id = getattr(record, id_field)
    mark_old_version_as_stale(record_type, record_id, id_field)

    deleted = record.model_copy(update={
        "updated_at": datetime.now(timezone.utc),
        "is_current": True,
        "is_deleted": True,
    })
    save_version(deleted, record_type, id_field)
    log_action(user_id, "delete", record_type, str(record_id))

    return {"message": f"{_label(record_type)} deleted", id_field: str(record_id)}


def log_action(user_id: str | None, action: str, resource_type: str, resource_id: str | None, details: dict | None = None):

    # Normalize details: convert UUIDs and datetimes to strings
    normalized = {}
    for k, v in (details or {}).items():
        if k in SENSITIVE_FIELDS:
            normalized[k] = "***REDACTED***"
        elif isinstance(v, UUID):
            normalized[k] = str(v)
        elif isinstance(v, Enum):
            normalized[k] = v.value
        elif isinstance(v, (datetime, date)):
            normalized[k] = v.isoformat()
        else:
            normalized[k] = v
    details_json = json.dumps(normalized)

    entry = AuditLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details_json,
    )

    save_version(entry, "audit_logs", "log_id")
    logger.debug("audit %s %s %s", action, resource_type, resource_id)
