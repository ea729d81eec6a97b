from __future__ import annotations

"""
@meta
name: deployment_orchestrator
type: orchestrator
domain: deployment
responsibility:
  - Register the fine-tuned model, recreate the endpoint, deploy, cut over traffic
  - Enforce strict step ordering with no partial-success result
inputs:
  - Authenticated MLClient
  - DeploymentConfig
  - Training job name
outputs:
  - DeploymentResult
tags:
  - orchestration
  - azureml
  - deployment
ci:
  runnable: false
  needs_gpu: false
  needs_cloud: true
lifecycle:
  status: active
"""
from typing import Any, Dict, Optional

from azure.ai.ml import MLClient

from common.shared.logging_utils import get_logger
from constants import IDENTITY_CLIENT_ID_ENV_VAR
from .config import DeploymentConfig
from .endpoint import ensure_clean_endpoint, shift_traffic
from .errors import RegistrationError
from .model import register_model
from .online_deployment import create_or_update_deployment
from .result import DeploymentResult

logger = get_logger(__name__)

_UNSET = object()


def build_environment_variables(config: DeploymentConfig) -> Dict[str, str]:
    """Deployment environment: configured variables plus the identity client id."""
    env_vars = dict(config.environment_variables)
    env_vars[IDENTITY_CLIENT_ID_ENV_VAR] = config.identity_client_id
    return env_vars


def deploy(
    ml_client: MLClient,
    config: DeploymentConfig,
    job_name: Optional[str] = None,
    timeout: Any = _UNSET,
) -> DeploymentResult:
    """
    Publish a training job's model as the sole deployment of a live endpoint.

    Steps run strictly in order and each one requires the previous one to have
    succeeded:

    1. Register the job's ``model_output`` artifact as a new model version.
    2. Delete the endpoint if it exists, then create it fresh.
    3. Create (or update) the deployment serving the registered model.
    4. Route 100% of the endpoint's traffic to that deployment.

    Every step converges rather than accumulates, so a failed run is retried
    by invoking ``deploy`` again from the top.

    Args:
        ml_client: Authenticated Azure ML client.
        config: Deployment configuration.
        job_name: Training job name; defaults to ``config.training_job_name``.
        timeout: Per-operation wait limit in seconds; defaults to
            ``config.operation_timeout_seconds``. ``None`` waits without bound.

    Returns:
        DeploymentResult describing the live endpoint.

    Raises:
        RegistrationError: Step 1 failed; nothing else was attempted.
        EndpointOperationError: Step 2 failed; no deployment was attempted.
        DeploymentOperationError: Step 3 failed; traffic was not touched.
        TrafficUpdateError: Step 4 failed; the deployment exists but gets no traffic.
    """
    job_name = job_name or config.training_job_name
    if not job_name:
        raise RegistrationError(
            "No training job name given; set model.training_job_name or pass --job-name"
        )
    if timeout is _UNSET:
        timeout = config.operation_timeout_seconds

    logger.info(
        "Deploying job '%s' as model '%s' to endpoint '%s' / deployment '%s'",
        job_name,
        config.model_name,
        config.endpoint_name,
        config.deployment_name,
    )

    logger.info("Step 1/4: registering model")
    model = register_model(
        ml_client,
        model_name=config.model_name,
        job_name=job_name,
        model_type=config.model_type,
    )

    logger.info("Step 2/4: ensuring clean endpoint")
    ensure_clean_endpoint(
        ml_client,
        endpoint_name=config.endpoint_name,
        description=config.endpoint_description,
        identity_resource_id=config.identity_resource_id,
        timeout=timeout,
    )

    logger.info("Step 3/4: creating deployment")
    create_or_update_deployment(
        ml_client,
        endpoint_name=config.endpoint_name,
        deployment_name=config.deployment_name,
        model=model,
        compute=config.compute,
        environment_variables=build_environment_variables(config),
        request_settings=config.request_settings,
        liveness_probe=config.liveness_probe,
        readiness_probe=config.readiness_probe,
        timeout=timeout,
    )

    logger.info("Step 4/4: shifting traffic")
    endpoint = shift_traffic(
        ml_client,
        endpoint_name=config.endpoint_name,
        deployment_name=config.deployment_name,
        timeout=timeout,
    )

    result = DeploymentResult(
        model_id=model.id,
        model_name=model.name,
        model_version=str(model.version),
        model_path=str(model.path),
        endpoint_name=config.endpoint_name,
        deployment_name=config.deployment_name,
        training_job_name=job_name,
        traffic=dict(endpoint.traffic),
        scoring_uri=getattr(endpoint, "scoring_uri", None),
    )
    logger.info(
        "Deployment complete: %s serves %s:%s at %s",
        result.endpoint_name,
        result.model_name,
        result.model_version,
        result.scoring_uri or "<scoring uri pending>",
    )
    return result
