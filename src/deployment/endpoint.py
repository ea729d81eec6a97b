from __future__ import annotations

"""
@meta
name: deployment_endpoint
type: utility
domain: azureml
responsibility:
  - Replace any existing online endpoint with a freshly created one
  - Route all endpoint traffic to a single deployment
  - Send a smoke-test request to a deployed endpoint
inputs:
  - Endpoint and deployment names
  - User-assigned managed identity resource id
outputs:
  - ManagedOnlineEndpoint instances
tags:
  - utility
  - azureml
  - endpoint
ci:
  runnable: false
  needs_gpu: false
  needs_cloud: true
lifecycle:
  status: active
"""
from pathlib import Path
from typing import Optional

from azure.ai.ml import MLClient
from azure.ai.ml.entities import (
    IdentityConfiguration,
    ManagedIdentityConfiguration,
    ManagedOnlineEndpoint,
)
from azure.core.exceptions import ResourceNotFoundError

from common.shared.logging_utils import get_logger
from constants import (
    ENDPOINT_AUTH_MODE,
    ENDPOINT_IDENTITY_TYPE,
    FULL_TRAFFIC_PERCENT,
)
from .errors import EndpointOperationError, TrafficUpdateError
from .operations import PLATFORM_ERRORS, run_operation

logger = get_logger(__name__)


def build_endpoint(
    endpoint_name: str,
    description: str,
    identity_resource_id: str,
) -> ManagedOnlineEndpoint:
    """Build a key-authenticated endpoint bound to one user-assigned identity."""
    return ManagedOnlineEndpoint(
        name=endpoint_name,
        description=description,
        auth_mode=ENDPOINT_AUTH_MODE,
        identity=IdentityConfiguration(
            type=ENDPOINT_IDENTITY_TYPE,
            user_assigned_identities=[
                ManagedIdentityConfiguration(resource_id=identity_resource_id)
            ],
        ),
    )


def ensure_clean_endpoint(
    ml_client: MLClient,
    endpoint_name: str,
    description: str,
    identity_resource_id: str,
    timeout: Optional[float] = None,
) -> ManagedOnlineEndpoint:
    """
    Delete any endpoint named ``endpoint_name`` and create it again.

    Starting from a new endpoint guarantees no leftover traffic split or
    identity binding survives from an earlier run. An endpoint that does not
    exist yet is already clean.

    Args:
        ml_client: Azure ML client used for endpoint operations.
        endpoint_name: Name of the endpoint to (re)create.
        description: Endpoint description.
        identity_resource_id: ARM resource id of the user-assigned identity.
        timeout: Per-operation wait limit in seconds.

    Returns:
        The created endpoint as reported by the platform.

    Raises:
        EndpointOperationError: If lookup, delete or create fails or times out.
    """
    logger.info("Looking up existing endpoint '%s'", endpoint_name)
    try:
        ml_client.online_endpoints.get(name=endpoint_name)
    except ResourceNotFoundError:
        logger.info("Endpoint '%s' does not exist; nothing to delete", endpoint_name)
    except PLATFORM_ERRORS as exc:
        raise EndpointOperationError(
            f"Lookup of endpoint '{endpoint_name}' failed: {exc}"
        ) from exc
    else:
        logger.info("Deleting existing endpoint '%s'", endpoint_name)
        run_operation(
            lambda: ml_client.online_endpoints.begin_delete(name=endpoint_name),
            f"Deletion of endpoint '{endpoint_name}'",
            EndpointOperationError,
            timeout,
        )
        logger.info("Deleted endpoint '%s'", endpoint_name)

    endpoint = build_endpoint(endpoint_name, description, identity_resource_id)
    logger.info(
        "Creating endpoint '%s' with identity %s", endpoint_name, identity_resource_id
    )
    created = run_operation(
        lambda: ml_client.online_endpoints.begin_create_or_update(endpoint),
        f"Creation of endpoint '{endpoint_name}'",
        EndpointOperationError,
        timeout,
    )
    logger.info("Created endpoint '%s'", endpoint_name)
    return created


def shift_traffic(
    ml_client: MLClient,
    endpoint_name: str,
    deployment_name: str,
    timeout: Optional[float] = None,
) -> ManagedOnlineEndpoint:
    """
    Send 100% of the endpoint's traffic to ``deployment_name``.

    Any existing allocation is overwritten, not merged. Nothing is rolled back
    on failure: the deployment stays up but receives no traffic.

    Args:
        ml_client: Azure ML client used for endpoint operations.
        endpoint_name: Endpoint whose traffic map is updated.
        deployment_name: Deployment that should receive all traffic.
        timeout: Wait limit in seconds for the update.

    Returns:
        The updated endpoint.

    Raises:
        TrafficUpdateError: If the endpoint cannot be read or updated, or the
            platform reports a different allocation afterwards.
    """
    try:
        endpoint = ml_client.online_endpoints.get(name=endpoint_name)
    except PLATFORM_ERRORS as exc:
        raise TrafficUpdateError(
            f"Could not read traffic for endpoint '{endpoint_name}': {exc}"
        ) from exc

    logger.info("Traffic on '%s' before update: %s", endpoint_name, dict(endpoint.traffic or {}))

    requested = {deployment_name: FULL_TRAFFIC_PERCENT}
    endpoint.traffic = requested
    updated = run_operation(
        lambda: ml_client.online_endpoints.begin_create_or_update(endpoint),
        f"Traffic update of endpoint '{endpoint_name}'",
        TrafficUpdateError,
        timeout,
    )

    after = dict(updated.traffic or {})
    logger.info("Traffic on '%s' after update: %s", endpoint_name, after)
    if after != requested:
        raise TrafficUpdateError(
            f"Endpoint '{endpoint_name}' reports traffic {after}, expected {requested}"
        )
    return updated


def invoke_endpoint(
    ml_client: MLClient,
    endpoint_name: str,
    deployment_name: str,
    request_file: Path,
) -> str:
    """
    Send one scoring request to a specific deployment as a smoke test.

    Raises:
        FileNotFoundError: If ``request_file`` does not exist.
        EndpointOperationError: If the endpoint rejects the request.
    """
    if not request_file.exists():
        raise FileNotFoundError(f"Sample request not found: {request_file}")

    logger.info(
        "Invoking '%s/%s' with %s", endpoint_name, deployment_name, request_file
    )
    try:
        response = ml_client.online_endpoints.invoke(
            endpoint_name=endpoint_name,
            deployment_name=deployment_name,
            request_file=str(request_file),
        )
    except PLATFORM_ERRORS as exc:
        raise EndpointOperationError(
            f"Smoke-test request to '{endpoint_name}' failed: {exc}"
        ) from exc

    logger.info("Endpoint '%s' responded: %s", endpoint_name, response)
    return response
