"""Shared pytest fixtures for all tests."""

import sys
import tempfile
from pathlib import Path

import pytest

# Add tests directory to path so test modules can import fixtures.*
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

from deployment.config import DeploymentConfig  # noqa: E402
from fixtures.fake_platform import FakeMLClient, FakePlatform  # noqa: E402

IDENTITY_RESOURCE_ID = (
    "/subscriptions/00000000-0000-0000-0000-000000000000/resourceGroups/rg-test"
    "/providers/Microsoft.ManagedIdentity/userAssignedIdentities/uai-endpoint"
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def deployment_config() -> DeploymentConfig:
    """Config for model-a served by endpoint-a/dep-a, waiting without bound."""
    return DeploymentConfig(
        subscription_id="00000000-0000-0000-0000-000000000000",
        resource_group="rg-test",
        workspace_name="test-ws",
        identity_resource_id=IDENTITY_RESOURCE_ID,
        identity_client_id="11111111-1111-1111-1111-111111111111",
        model_name="model-a",
        endpoint_name="endpoint-a",
        deployment_name="dep-a",
        operation_timeout_seconds=None,
    )


@pytest.fixture
def fake_platform() -> FakePlatform:
    """Platform state with one completed training job, job-123."""
    platform = FakePlatform()
    platform.add_job("job-123")
    return platform


@pytest.fixture
def fake_ml_client(fake_platform) -> FakeMLClient:
    """Fake MLClient over ``fake_platform``."""
    return FakeMLClient(fake_platform)
