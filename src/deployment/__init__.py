"""Model deployment module.

Publishes a fine-tuned model from an Azure ML training job as the single,
full-traffic deployment of a managed online endpoint:

- Model registration from the job's ``model_output`` artifact
- Endpoint recreation with a user-assigned managed identity
- Deployment create/update with sizing, request limits and probes
- Traffic cutover to the new deployment
"""

from .config import (
    ComputeSettings,
    DeploymentConfig,
    ProbeConfig,
    RequestSettings,
    TrackingConfig,
    build_deployment_config,
    load_deployment_config,
)
from .errors import (
    ConfigurationError,
    DeploymentOperationError,
    DeploymentWorkflowError,
    EndpointOperationError,
    OperationTimeoutError,
    RegistrationError,
    TrafficUpdateError,
)
from .orchestrator import deploy
from .result import DeploymentResult

__all__ = [
    "ComputeSettings",
    "DeploymentConfig",
    "ProbeConfig",
    "RequestSettings",
    "TrackingConfig",
    "build_deployment_config",
    "load_deployment_config",
    "ConfigurationError",
    "DeploymentOperationError",
    "DeploymentWorkflowError",
    "EndpointOperationError",
    "OperationTimeoutError",
    "RegistrationError",
    "TrafficUpdateError",
    "deploy",
    "DeploymentResult",
]
