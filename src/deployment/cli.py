"""
@meta
name: deployment_cli
type: script
domain: deployment
responsibility:
  - Parse command-line arguments for the endpoint deployment
  - Run the deployment workflow and map its outcome to an exit status
inputs:
  - Command-line arguments
  - config/deployment.yaml
outputs:
  - Process exit status
tags:
  - cli
  - deployment
ci:
  runnable: false
  needs_gpu: false
  needs_cloud: true
lifecycle:
  status: active
"""

"""Command-line entry point for publishing a trained model as an online endpoint."""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from common.shared.logging_utils import get_logger, set_log_level
from .client import create_ml_client
from .config import load_deployment_config, parse_timeout
from .errors import ConfigurationError
from .endpoint import invoke_endpoint
from .orchestrator import deploy
from .tracking import record_deployment

logger = get_logger(__name__)


def _timeout_argument(value: str) -> float:
    """argparse type for --timeout: a positive number of seconds."""
    try:
        return parse_timeout(value)
    except ConfigurationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse_deployment_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments for the deployment run.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Register a trained model and serve it from a managed online endpoint"
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        default="config",
        help="Path to configuration directory containing deployment.yaml (default: config)",
    )
    parser.add_argument(
        "--job-name",
        type=str,
        default=None,
        help="Training job name (overrides model.training_job_name)",
    )
    parser.add_argument(
        "--timeout",
        type=_timeout_argument,
        default=None,
        help="Seconds to wait for each long-running operation (overrides operation_timeout_seconds)",
    )
    parser.add_argument(
        "--sample-request",
        type=str,
        default=None,
        help="JSON request file to send to the endpoint after deployment",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the deployment; return 0 on success and 1 on any failure."""
    args = parse_deployment_arguments(argv)
    if args.verbose:
        set_log_level(logging.DEBUG)

    try:
        config = load_deployment_config(Path(args.config_dir))
        ml_client = create_ml_client(config)

        deploy_kwargs: Dict[str, Any] = {"job_name": args.job_name}
        if args.timeout is not None:
            deploy_kwargs["timeout"] = args.timeout
        result = deploy(ml_client, config, **deploy_kwargs)

        record_deployment(ml_client, result, config.tracking)

        if args.sample_request:
            invoke_endpoint(
                ml_client,
                endpoint_name=result.endpoint_name,
                deployment_name=result.deployment_name,
                request_file=Path(args.sample_request),
            )
    except Exception:
        logger.exception("Deployment failed")
        return 1

    return 0
