from __future__ import annotations

"""
@meta
name: deployment_online_deployment
type: utility
domain: azureml
responsibility:
  - Build managed online deployment definitions from config
  - Create or update the deployment behind an endpoint
inputs:
  - Registered model
  - Compute, request and probe settings
outputs:
  - ManagedOnlineDeployment instances
tags:
  - utility
  - azureml
  - deployment
ci:
  runnable: false
  needs_gpu: false
  needs_cloud: true
lifecycle:
  status: active
"""
from typing import Mapping, Optional

from azure.ai.ml import MLClient
from azure.ai.ml.entities import (
    ManagedOnlineDeployment,
    Model,
    OnlineRequestSettings,
    ProbeSettings,
)

from common.shared.logging_utils import get_logger
from .config import ComputeSettings, ProbeConfig, RequestSettings
from .errors import DeploymentOperationError
from .operations import run_operation

logger = get_logger(__name__)


def _probe_settings(probe: ProbeConfig) -> ProbeSettings:
    return ProbeSettings(
        failure_threshold=probe.failure_threshold,
        success_threshold=probe.success_threshold,
        timeout=probe.timeout,
        period=probe.period,
        initial_delay=probe.initial_delay,
    )


def build_online_deployment(
    endpoint_name: str,
    deployment_name: str,
    model: Model,
    compute: ComputeSettings,
    environment_variables: Mapping[str, str],
    request_settings: RequestSettings,
    liveness_probe: ProbeConfig,
    readiness_probe: ProbeConfig,
) -> ManagedOnlineDeployment:
    """Translate config records into a :class:`ManagedOnlineDeployment`."""
    return ManagedOnlineDeployment(
        name=deployment_name,
        endpoint_name=endpoint_name,
        model=model.id,
        instance_type=compute.instance_type,
        instance_count=compute.instance_count,
        environment_variables=dict(environment_variables),
        request_settings=OnlineRequestSettings(
            max_concurrent_requests_per_instance=request_settings.max_concurrent_requests_per_instance,
            request_timeout_ms=request_settings.request_timeout_ms,
            max_queue_wait_ms=request_settings.max_queue_wait_ms,
        ),
        liveness_probe=_probe_settings(liveness_probe),
        readiness_probe=_probe_settings(readiness_probe),
    )


def create_or_update_deployment(
    ml_client: MLClient,
    endpoint_name: str,
    deployment_name: str,
    model: Model,
    compute: ComputeSettings,
    environment_variables: Mapping[str, str],
    request_settings: RequestSettings,
    liveness_probe: ProbeConfig,
    readiness_probe: ProbeConfig,
    timeout: Optional[float] = None,
) -> ManagedOnlineDeployment:
    """
    Submit the deployment definition and wait for it to converge.

    Submitting the same definition again converges to the same state, so a
    failed run can simply be retried.

    Args:
        ml_client: Azure ML client used for deployment operations.
        endpoint_name: Endpoint the deployment is bound to.
        deployment_name: Deployment name under that endpoint.
        model: Registered model to serve.
        compute: Instance type and count.
        environment_variables: Environment of the scoring container.
        request_settings: Concurrency, timeout and queue limits.
        liveness_probe: Liveness probe settings.
        readiness_probe: Readiness probe settings.
        timeout: Wait limit in seconds.

    Returns:
        The deployment as reported by the platform.

    Raises:
        DeploymentOperationError: If the platform rejects the deployment or
            the wait times out.
    """
    deployment = build_online_deployment(
        endpoint_name=endpoint_name,
        deployment_name=deployment_name,
        model=model,
        compute=compute,
        environment_variables=environment_variables,
        request_settings=request_settings,
        liveness_probe=liveness_probe,
        readiness_probe=readiness_probe,
    )
    logger.info(
        "Creating deployment '%s' on endpoint '%s' (model %s, %d x %s)",
        deployment_name,
        endpoint_name,
        model.id,
        compute.instance_count,
        compute.instance_type,
    )
    result = run_operation(
        lambda: ml_client.online_deployments.begin_create_or_update(deployment),
        f"Creation of deployment '{deployment_name}' on endpoint '{endpoint_name}'",
        DeploymentOperationError,
        timeout,
    )
    logger.info("Deployment '%s' is ready on endpoint '%s'", deployment_name, endpoint_name)
    return result
