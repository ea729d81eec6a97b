"""Stable deployment identifiers shared by the workflow, the CLI and tests.

These are *not* behaviour knobs (those live in ``config/deployment.yaml``),
but naming and path constants that rarely change.
"""

# Config file naming (maps to <config-dir>/deployment.yaml)
DEPLOYMENT_CONFIG_FILENAME = "deployment.yaml"
CONFIG_ENV_FILENAME = "config.env"

# Training job output that holds the fine-tuned model
MODEL_OUTPUT_NAME = "model_output"
JOB_ARTIFACT_PATH_TEMPLATE = "azureml://jobs/{job_name}/outputs/artifacts/paths/{output_name}"
JOB_STATUS_COMPLETED = "Completed"

# Endpoint settings
ENDPOINT_AUTH_MODE = "key"
ENDPOINT_IDENTITY_TYPE = "user_assigned"
DEFAULT_ENDPOINT_DESCRIPTION = "Online endpoint for the fine-tuned small language model"
FULL_TRAFFIC_PERCENT = 100

# Environment variable the scoring runtime reads to pick the endpoint identity
IDENTITY_CLIENT_ID_ENV_VAR = "UAI_CLIENT_ID"

# Default values (not in configs)
DEFAULT_OPERATION_TIMEOUT_SECONDS = 1800
DEFAULT_TRACKING_EXPERIMENT = "slm-endpoint-deployments"
