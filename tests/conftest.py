import pytest
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

ACCOUNT_ID = "123456789012"
REGION = "eu-west-1"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's AWS and logging environment out of the tests"""
    for name in ("LOG_LEVEL", "AWS_REGION", "AWS_DEFAULT_REGION",
                 "CLOUD_DISCOVERY_MAX_WORKERS", "CLOUD_DISCOVERY_OUTPUT_DIR"):
        monkeypatch.delenv(name, raising=False)


def client_error(code: str, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)


def paginated(pages_by_operation):
    """get_paginator side effect returning fixed pages per operation"""
    def get_paginator(operation):
        paginator = MagicMock()
        pages = pages_by_operation.get(operation, [{}])
        if isinstance(pages, Exception):
            paginator.paginate.side_effect = pages
        else:
            paginator.paginate.return_value = pages
        return paginator
    return get_paginator


@pytest.fixture
def clients():
    """Mock boto3 clients by service name, with an STS client for the account ID"""
    sts = MagicMock()
    sts.get_caller_identity.return_value = {
        "Account": ACCOUNT_ID,
        "Arn": f"arn:aws:iam::{ACCOUNT_ID}:user/auditor",
        "UserId": "AIDAEXAMPLE",
    }
    return {"sts": sts, "ec2": MagicMock(), "s3": MagicMock(), "kms": MagicMock(), "iam": MagicMock()}


@pytest.fixture
def session(clients):
    session = MagicMock()
    session.region_name = REGION
    session.client.side_effect = lambda name, region_name=None: clients[name]
    return session


@pytest.fixture
def config():
    from core.config import DiscoveryConfig
    return DiscoveryConfig(region=REGION)


@pytest.fixture
def register_resource():
    """Register resource variants for one test only, so they never reach --list-types or the type filters"""
    from ontology import schema, resource_type

    registered = []

    def register(cls, *type_names):
        resource_type(*type_names)(cls)
        registered.append(cls)
        return cls

    yield register

    for cls in registered:
        schema._registry.pop(cls, None)
