from __future__ import annotations

"""
@meta
name: deployment_model_registration
type: utility
domain: azureml
responsibility:
  - Derive the model artifact path from a training job name
  - Register the training job output as a new model version
inputs:
  - Training job name
  - Model name
outputs:
  - Registered Azure ML Model
tags:
  - utility
  - azureml
  - registry
ci:
  runnable: false
  needs_gpu: false
  needs_cloud: true
lifecycle:
  status: active
"""
from typing import Optional

from azure.ai.ml import MLClient
from azure.ai.ml.entities import Model
from azure.core.exceptions import ResourceNotFoundError

from common.shared.logging_utils import get_logger
from constants import (
    JOB_ARTIFACT_PATH_TEMPLATE,
    JOB_STATUS_COMPLETED,
    MODEL_OUTPUT_NAME,
)
from .errors import RegistrationError
from .operations import PLATFORM_ERRORS

logger = get_logger(__name__)


def build_model_artifact_path(job_name: str, output_name: str = MODEL_OUTPUT_NAME) -> str:
    """
    Build the datastore URI of a training job's model artifact.

    >>> build_model_artifact_path("job-123")
    'azureml://jobs/job-123/outputs/artifacts/paths/model_output'
    """
    return JOB_ARTIFACT_PATH_TEMPLATE.format(job_name=job_name, output_name=output_name)


def register_model(
    ml_client: MLClient,
    model_name: str,
    job_name: str,
    model_type: str = "mlflow_model",
    description: Optional[str] = None,
) -> Model:
    """
    Register a completed training job's output as a new model version.

    Re-running registers another version under the same name; earlier
    versions are left untouched.

    Args:
        ml_client: Azure ML client used for job and model operations.
        model_name: Registry name of the model.
        job_name: Name of the completed training job (from job history).
        model_type: Azure ML asset type of the artifact.
        description: Optional model description.

    Returns:
        The registered :class:`Model` (id, name, version, path).

    Raises:
        RegistrationError: If the job does not exist, has not completed, or
            the platform rejects the registration.
    """
    if not job_name or not job_name.strip():
        raise RegistrationError(
            "No training job name configured; copy it from the workspace job history"
        )

    logger.info("Registering model '%s' from training job '%s'", model_name, job_name)

    try:
        job = ml_client.jobs.get(job_name)
    except ResourceNotFoundError as exc:
        raise RegistrationError(f"Training job '{job_name}' was not found") from exc
    except PLATFORM_ERRORS as exc:
        raise RegistrationError(f"Could not look up training job '{job_name}': {exc}") from exc

    if job.status != JOB_STATUS_COMPLETED:
        raise RegistrationError(
            f"Training job '{job_name}' has status '{job.status}'; "
            f"only {JOB_STATUS_COMPLETED} jobs can be registered"
        )

    artifact_path = build_model_artifact_path(job_name)
    model = Model(
        name=model_name,
        path=artifact_path,
        type=model_type,
        description=description or f"Fine-tuned model from training job {job_name}",
        tags={"training_job": job_name},
    )

    try:
        registered = ml_client.models.create_or_update(model)
    except PLATFORM_ERRORS as exc:
        raise RegistrationError(
            f"Registration of '{model_name}' from {artifact_path} failed: {exc}"
        ) from exc

    logger.info(
        "Registered model %s version %s (%s)",
        registered.name,
        registered.version,
        registered.id,
    )
    return registered
