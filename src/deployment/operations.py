"""
@meta
name: deployment_operations
type: utility
domain: azureml
responsibility:
  - Wait for Azure ML long-running operations with an explicit timeout
inputs:
  - LROPoller handles returned by begin_* calls
outputs:
  - Operation results
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

"""Blocking waits on long-running platform operations."""

from typing import Any, Callable, Optional, Type

from azure.ai.ml.exceptions import MlException
from azure.core.exceptions import AzureError
from azure.core.polling import LROPoller

from common.shared.logging_utils import get_logger
from .errors import DeploymentWorkflowError, OperationTimeoutError

logger = get_logger(__name__)

# Exceptions the Azure ML SDK raises for rejected, failed or unreachable platform calls
PLATFORM_ERRORS = (AzureError, MlException)


def wait_for_operation(
    poller: LROPoller,
    description: str,
    timeout: Optional[float] = None,
) -> Any:
    """
    Block until a long-running operation reaches a terminal state.

    The remote operation is never cancelled: on timeout the wait is abandoned
    and the operation keeps running on the platform.

    Args:
        poller: Poller returned by an Azure ML ``begin_*`` call.
        description: Human-readable operation name for logs and errors.
        timeout: Maximum seconds to wait; ``None`` waits without bound.

    Returns:
        The operation result (``None`` for deletes).

    Raises:
        OperationTimeoutError: If the operation is still running after ``timeout``.
        azure.core.exceptions.HttpResponseError: If the operation fails.
    """
    logger.debug("Waiting for %s (timeout=%s)", description, timeout)
    # wait() re-raises any error from the polling thread
    poller.wait(timeout=timeout)
    if not poller.done():
        raise OperationTimeoutError(
            f"{description} did not finish within {timeout} seconds "
            f"(status: {poller.status()}); the operation continues on the platform"
        )
    return poller.result()


def run_operation(
    submit: Callable[[], LROPoller],
    description: str,
    error_cls: Type[DeploymentWorkflowError],
    timeout: Optional[float] = None,
) -> Any:
    """
    Submit a long-running operation and wait for it, translating failures.

    Args:
        submit: Zero-argument callable issuing the ``begin_*`` call.
        description: Human-readable operation name for logs and errors.
        error_cls: Workflow error raised for any platform failure or timeout.
        timeout: Maximum seconds to wait; ``None`` waits without bound.

    Returns:
        The operation result.

    Raises:
        DeploymentWorkflowError: ``error_cls`` chained to the underlying cause.
    """
    try:
        return wait_for_operation(submit(), description, timeout)
    except OperationTimeoutError as exc:
        raise error_cls(str(exc)) from exc
    except PLATFORM_ERRORS as exc:
        raise error_cls(f"{description} failed: {exc}") from exc
