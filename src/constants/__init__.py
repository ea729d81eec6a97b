"""Shared constants module.

This module provides stable deployment identifiers shared across the workflow and CLI.
"""

from .deployment import (
    DEPLOYMENT_CONFIG_FILENAME,
    CONFIG_ENV_FILENAME,
    MODEL_OUTPUT_NAME,
    JOB_ARTIFACT_PATH_TEMPLATE,
    JOB_STATUS_COMPLETED,
    ENDPOINT_AUTH_MODE,
    ENDPOINT_IDENTITY_TYPE,
    DEFAULT_ENDPOINT_DESCRIPTION,
    FULL_TRAFFIC_PERCENT,
    IDENTITY_CLIENT_ID_ENV_VAR,
    DEFAULT_OPERATION_TIMEOUT_SECONDS,
    DEFAULT_TRACKING_EXPERIMENT,
)

__all__ = [
    "DEPLOYMENT_CONFIG_FILENAME",
    "CONFIG_ENV_FILENAME",
    "MODEL_OUTPUT_NAME",
    "JOB_ARTIFACT_PATH_TEMPLATE",
    "JOB_STATUS_COMPLETED",
    "ENDPOINT_AUTH_MODE",
    "ENDPOINT_IDENTITY_TYPE",
    "DEFAULT_ENDPOINT_DESCRIPTION",
    "FULL_TRAFFIC_PERCENT",
    "IDENTITY_CLIENT_ID_ENV_VAR",
    "DEFAULT_OPERATION_TIMEOUT_SECONDS",
    "DEFAULT_TRACKING_EXPERIMENT",
]
