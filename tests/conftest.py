"""Shared fixtures: in-memory database, mocked S3 and an app client."""

import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from cloud_vault.core.config import Settings
from cloud_vault.main import create_app
from cloud_vault.services.storage import ObjectStorage
from tests.consts import TEST_BUCKET_NAME, TEST_HASH_METHOD, TEST_PUBLIC_BASE_URL


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches for real ones."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        aws_s3_bucket_name=TEST_BUCKET_NAME,
        storage_public_base_url=TEST_PUBLIC_BASE_URL,
        password_hash_method=TEST_HASH_METHOD,
    )


@pytest.fixture
def mock_s3():
    """Mock S3 with the test bucket created.

    Yields:
        boto3 S3 client bound to the mocked service.
    """
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield client


@pytest.fixture
def storage(mock_s3):
    return ObjectStorage(
        mock_s3,
        bucket=TEST_BUCKET_NAME,
        folder="cloud-vault",
        public_base_url=TEST_PUBLIC_BASE_URL,
    )


@pytest.fixture
def broken_storage(mock_s3):
    """Storage pointed at a bucket that does not exist."""
    return ObjectStorage(
        mock_s3,
        bucket="missing-bucket",
        folder="cloud-vault",
        public_base_url=TEST_PUBLIC_BASE_URL,
    )


@pytest.fixture
def app(settings, storage):
    return create_app(settings, storage=storage)


@pytest.fixture
def client(app):
    # entering the client runs startup: tables + default admin
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app, client):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def admin_id(db):
    from cloud_vault.crud.users import find_first_admin

    return find_first_admin(db).id
