from __future__ import annotations

"""
@meta
name: deployment_tracking
type: utility
domain: tracking
responsibility:
  - Record completed deployments as MLflow runs in the workspace
inputs:
  - DeploymentResult
  - Tracking settings
outputs:
  - MLflow run id
tags:
  - utility
  - mlflow
  - azureml
ci:
  runnable: false
  needs_gpu: false
  needs_cloud: true
lifecycle:
  status: active
"""
from typing import Any, Optional

import mlflow

from common.shared.logging_utils import get_logger
from .config import TrackingConfig
from .operations import PLATFORM_ERRORS
from .result import DeploymentResult

logger = get_logger(__name__)


def get_workspace_tracking_uri(ml_client: Any) -> str:
    """
    Get the MLflow tracking URI of the client's Azure ML workspace.

    Raises:
        ImportError: If azureml-mlflow is not installed.
        RuntimeError: If the workspace cannot be read.
    """
    # Registers the 'azureml' URI scheme with MLflow
    try:
        import azureml.mlflow  # noqa: F401
    except ImportError as exc:
        raise ImportError(
            "azureml.mlflow is required for workspace tracking. "
            "Install it with: pip install azureml-mlflow"
        ) from exc

    try:
        workspace = ml_client.workspaces.get(name=ml_client.workspace_name)
    except PLATFORM_ERRORS as exc:
        raise RuntimeError(f"Failed to get Azure ML workspace tracking URI: {exc}") from exc
    return workspace.mlflow_tracking_uri


def record_deployment(
    ml_client: Any,
    result: DeploymentResult,
    tracking: TrackingConfig,
) -> Optional[str]:
    """
    Log a completed deployment as an MLflow run.

    Tracking is a side channel: any failure is logged as a warning and the
    deployment itself still counts as successful.

    Returns:
        The MLflow run id, or ``None`` if tracking is disabled or failed.
    """
    if not tracking.enabled:
        return None

    try:
        mlflow.set_tracking_uri(get_workspace_tracking_uri(ml_client))
        mlflow.set_experiment(tracking.experiment_name)
        with mlflow.start_run(
            run_name=f"{result.endpoint_name}-{result.deployment_name}"
        ) as run:
            mlflow.log_params(
                {
                    "endpoint_name": result.endpoint_name,
                    "deployment_name": result.deployment_name,
                    "model_name": result.model_name,
                    "model_version": result.model_version,
                }
            )
            mlflow.set_tags(
                {
                    "training_job": result.training_job_name,
                    "model_id": result.model_id,
                    "scoring_uri": result.scoring_uri or "",
                }
            )
            mlflow.log_dict(result.traffic, "traffic.json")
            run_id = run.info.run_id
    except Exception as exc:
        logger.warning("Could not record deployment in MLflow: %s", exc)
        return None

    logger.info("Recorded deployment in MLflow run %s", run_id)
    return run_id
