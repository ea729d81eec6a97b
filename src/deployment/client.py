from __future__ import annotations

"""
@meta
name: deployment_client
type: utility
domain: azureml
responsibility:
  - Build an authenticated Azure ML client for the deployment workflow
inputs:
  - DeploymentConfig
  - Optional Azure credential
outputs:
  - MLClient instance
tags:
  - utility
  - azureml
ci:
  runnable: false
  needs_gpu: false
  needs_cloud: true
lifecycle:
  status: active
"""
from typing import Any, Optional

from azure.ai.ml import MLClient
from azure.identity import DefaultAzureCredential

from common.shared.logging_utils import get_logger
from .config import DeploymentConfig

logger = get_logger(__name__)


def create_ml_client(config: DeploymentConfig, credential: Optional[Any] = None) -> MLClient:
    """
    Create the Azure ML client the workflow operates through.

    The credential defaults to :class:`DefaultAzureCredential`, which picks up
    an ``az login`` session, managed identity or environment credentials. Login
    itself happens outside this workflow; the returned client is passed
    explicitly into :func:`deployment.orchestrator.deploy`.

    Args:
        config: Deployment configuration with the workspace coordinates.
        credential: Optional pre-built Azure credential.

    Returns:
        MLClient scoped to the configured workspace.
    """
    credential = credential or DefaultAzureCredential()
    logger.info(
        "Connecting to workspace %s (resource group %s, subscription %s...)",
        config.workspace_name,
        config.resource_group,
        config.subscription_id[:8],
    )
    return MLClient(
        credential=credential,
        subscription_id=config.subscription_id,
        resource_group_name=config.resource_group,
        workspace_name=config.workspace_name,
    )
