# tests/conftest.py
import os
from uuid import uuid4

# --- Configure env for tests *before* importing app code ---
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("AWS_REGION", "eu-west-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("SECRET_KEY", "finledger-test-secret-key-0123456789abcdef")
os.environ.setdefault("BASE_CURRENCY", "RUB")
# Ensure we always have a bucket name for tests
os.environ.setdefault("S3_BUCKET", f"fl-test-{uuid4().hex}")

import pytest
from fastapi.testclient import TestClient
from moto import mock_aws
import boto3

# Import after env is set so settings reads the values above
from finledger.config import settings
import finledger.main as main
from finledger.services.auth import create_access_token


def _empty_bucket(s3, bucket_name: str):
    """Helper: delete all objects in the bucket."""
    paginator = s3.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket_name):
        for obj in page.get("Contents", []):
            s3.delete_object(Bucket=bucket_name, Key=obj["Key"])


@pytest.fixture(scope="session", autouse=True)
def aws_moto():
    """Global Moto for all tests (no real AWS calls)."""
    with mock_aws():
        yield


@pytest.fixture(scope="session", autouse=True)
def setup_s3(aws_moto):
    """Create the test bucket inside Moto."""
    bucket_name = settings.s3_bucket
    region = settings.aws_region
    s3 = boto3.client("s3", region_name=region)

    # us-east-1 doesn't need LocationConstraint; others do
    if region == "us-east-1":
        s3.create_bucket(Bucket=bucket_name)
    else:
        s3.create_bucket(
            Bucket=bucket_name,
            CreateBucketConfiguration={"LocationConstraint": region},
        )

    yield s3, bucket_name

    # Final cleanup
    _empty_bucket(s3, bucket_name)


@pytest.fixture(autouse=True)
def clean_bucket(setup_s3):
    """Ensure the bucket is empty before each test."""
    s3, bucket_name = setup_s3
    _empty_bucket(s3, bucket_name)
    yield


@pytest.fixture(scope="function")
def client():
    return TestClient(main.app)


def _headers_for(user_id: str) -> dict:
    token = create_access_token({"sub": user_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_id():
    return f"user-{uuid4().hex[:8]}"


@pytest.fixture
def auth_headers(user_id):
    return _headers_for(user_id)


@pytest.fixture
def another_user():
    other_id = f"other-{uuid4().hex[:8]}"
    return other_id, _headers_for(other_id)
