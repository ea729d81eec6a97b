from __future__ import annotations

"""
@meta
name: deployment_config
type: utility
domain: config
responsibility:
  - Build the immutable deployment configuration from deployment.yaml
  - Resolve Azure coordinates from environment variables and config.env
  - Validate required fields and endpoint/deployment naming rules
inputs:
  - deployment.yaml configuration
  - Process environment and config.env
outputs:
  - DeploymentConfig dataclass
tags:
  - utility
  - config
  - azureml
  - deployment
ci:
  runnable: true
  needs_gpu: false
  needs_cloud: false
lifecycle:
  status: active
"""
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from common.shared.env_file import load_env_file
from common.shared.yaml_utils import load_yaml
from constants import (
    CONFIG_ENV_FILENAME,
    DEFAULT_ENDPOINT_DESCRIPTION,
    DEFAULT_OPERATION_TIMEOUT_SECONDS,
    DEFAULT_TRACKING_EXPERIMENT,
    DEPLOYMENT_CONFIG_FILENAME,
)
from .errors import ConfigurationError

# Centralised sizing defaults for a single-GPU small language model deployment.
# These can be overridden in deployment.yaml (see build_deployment_config below).
DEFAULT_INSTANCE_TYPE = "Standard_NC4as_T4_v3"
DEFAULT_INSTANCE_COUNT = 1
DEFAULT_MODEL_TYPE = "mlflow_model"

# Online endpoint and deployment names: 3-32 chars, letter first, no trailing hyphen.
_RESOURCE_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9-]{1,30}[a-zA-Z0-9]$")

# Settings that may come from the environment, keyed by their dotted YAML path.
ENV_OVERRIDES = {
    "azure.subscription_id": "AZURE_SUBSCRIPTION_ID",
    "azure.resource_group": "AZURE_RESOURCE_GROUP",
    "azure.workspace_name": "AZURE_WORKSPACE_NAME",
    "identity.resource_id": "UAI_RESOURCE_ID",
    "identity.client_id": "UAI_CLIENT_ID",
}


@dataclass(frozen=True)
class ComputeSettings:
    """Instance sizing for the online deployment."""

    instance_type: str = DEFAULT_INSTANCE_TYPE
    instance_count: int = DEFAULT_INSTANCE_COUNT


@dataclass(frozen=True)
class RequestSettings:
    """Request-handling limits applied per deployment instance."""

    max_concurrent_requests_per_instance: int = 1
    request_timeout_ms: int = 90000
    max_queue_wait_ms: int = 500


@dataclass(frozen=True)
class ProbeConfig:
    """Liveness/readiness probe settings (seconds, except thresholds)."""

    failure_threshold: int = 30
    success_threshold: int = 1
    timeout: int = 2
    period: int = 10
    initial_delay: int = 300


@dataclass(frozen=True)
class TrackingConfig:
    """Optional MLflow record of completed deployments."""

    enabled: bool = False
    experiment_name: str = DEFAULT_TRACKING_EXPERIMENT


@dataclass(frozen=True)
class DeploymentConfig:
    """
    Resolved configuration for one deployment run.

    Instances are typically built from ``deployment.yaml`` via
    :func:`load_deployment_config`. The object is read-only for the lifetime
    of a run; the training job name is the only per-run input and may also be
    supplied on the command line.
    """

    subscription_id: str
    resource_group: str
    workspace_name: str
    identity_resource_id: str
    identity_client_id: str
    model_name: str
    endpoint_name: str
    deployment_name: str
    endpoint_description: str = DEFAULT_ENDPOINT_DESCRIPTION
    training_job_name: Optional[str] = None
    model_type: str = DEFAULT_MODEL_TYPE
    compute: ComputeSettings = field(default_factory=ComputeSettings)
    environment_variables: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    request_settings: RequestSettings = field(default_factory=RequestSettings)
    liveness_probe: ProbeConfig = field(default_factory=ProbeConfig)
    readiness_probe: ProbeConfig = field(default_factory=ProbeConfig)
    operation_timeout_seconds: Optional[float] = DEFAULT_OPERATION_TIMEOUT_SECONDS
    tracking: TrackingConfig = field(default_factory=TrackingConfig)

    def __post_init__(self) -> None:
        # Read-only view over a private copy
        object.__setattr__(
            self, "environment_variables", MappingProxyType(dict(self.environment_variables))
        )


def _is_placeholder(value: Any) -> bool:
    return isinstance(value, str) and value.strip().startswith("${")


def _section(settings: Mapping[str, Any], name: str) -> Dict[str, Any]:
    section = settings.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Config section '{name}' must be a mapping, got {type(section).__name__}"
        )
    return section


def _resolve_value(
    yaml_value: Any,
    env_key: Optional[str],
    environ: Mapping[str, str],
    env_file_vars: Mapping[str, str],
) -> Optional[str]:
    """Resolve a setting with precedence environment > config.env > YAML."""
    if env_key:
        for source in (environ, env_file_vars):
            candidate = source.get(env_key)
            if candidate:
                return candidate
    if yaml_value is None or _is_placeholder(yaml_value):
        return None
    value = str(yaml_value).strip()
    return value or None


def _build_probe(raw: Mapping[str, Any], name: str) -> ProbeConfig:
    defaults = ProbeConfig()
    try:
        return ProbeConfig(
            failure_threshold=int(raw.get("failure_threshold", defaults.failure_threshold)),
            success_threshold=int(raw.get("success_threshold", defaults.success_threshold)),
            timeout=int(raw.get("timeout", defaults.timeout)),
            period=int(raw.get("period", defaults.period)),
            initial_delay=int(raw.get("initial_delay", defaults.initial_delay)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid {name} settings: {exc}") from exc


def _build_request_settings(raw: Mapping[str, Any]) -> RequestSettings:
    defaults = RequestSettings()
    try:
        return RequestSettings(
            max_concurrent_requests_per_instance=int(
                raw.get(
                    "max_concurrent_requests_per_instance",
                    defaults.max_concurrent_requests_per_instance,
                )
            ),
            request_timeout_ms=int(raw.get("request_timeout_ms", defaults.request_timeout_ms)),
            max_queue_wait_ms=int(raw.get("max_queue_wait_ms", defaults.max_queue_wait_ms)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid request_settings: {exc}") from exc


def _parse_flag(raw: Any, name: str) -> bool:
    if not isinstance(raw, bool):
        raise ConfigurationError(f"{name} must be true or false, got {raw!r}")
    return raw


def parse_timeout(raw: Any) -> Optional[float]:
    """Parse a per-operation timeout; ``None`` means wait without bound."""
    if raw is None:
        return None
    try:
        timeout = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"operation_timeout_seconds must be a number or null, got {raw!r}"
        ) from exc
    if timeout <= 0:
        raise ConfigurationError("operation_timeout_seconds must be positive")
    return timeout


def validate_resource_name(kind: str, name: str) -> None:
    """
    Check an endpoint or deployment name against Azure ML naming rules.

    Raises:
        ConfigurationError: If ``name`` is not 3-32 characters of letters,
            digits and hyphens, starting with a letter and not ending with a hyphen.
    """
    if not _RESOURCE_NAME_PATTERN.match(name):
        raise ConfigurationError(
            f"Invalid {kind} name '{name}': use 3-32 letters, digits or hyphens, "
            "starting with a letter and not ending with a hyphen"
        )


def build_deployment_config(
    settings: Mapping[str, Any],
    env_file_vars: Optional[Mapping[str, str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DeploymentConfig:
    """
    Build a :class:`DeploymentConfig` from parsed ``deployment.yaml`` settings.

    Expected structure:

    .. code-block:: yaml

        azure:
          subscription_id: "${AZURE_SUBSCRIPTION_ID}"
          resource_group: "${AZURE_RESOURCE_GROUP}"
          workspace_name: "slm-workshop-ws"
        identity:
          resource_id: "${UAI_RESOURCE_ID}"
          client_id: "${UAI_CLIENT_ID}"
        model:
          name: "slm-finetuned"
          training_job_name: "<copied from job history>"
        endpoint:
          name: "slm-endpoint"
        deployment:
          name: "slm-blue"
          instance_type: "Standard_NC4as_T4_v3"

    Args:
        settings: Parsed YAML dictionary.
        env_file_vars: Values loaded from ``config.env`` (lower precedence than
            ``environ``).
        environ: Process environment; defaults to :data:`os.environ`.

    Returns:
        Validated, immutable deployment configuration.

    Raises:
        ConfigurationError: If required values are missing or malformed.
    """
    environ = os.environ if environ is None else environ
    env_file_vars = env_file_vars or {}

    azure_section = _section(settings, "azure")
    identity_section = _section(settings, "identity")
    model_section = _section(settings, "model")
    endpoint_section = _section(settings, "endpoint")
    deployment_section = _section(settings, "deployment")
    tracking_section = _section(settings, "tracking")

    def resolve(path: str, raw: Any) -> Optional[str]:
        return _resolve_value(raw, ENV_OVERRIDES.get(path), environ, env_file_vars)

    required = {
        "azure.subscription_id": resolve("azure.subscription_id", azure_section.get("subscription_id")),
        "azure.resource_group": resolve("azure.resource_group", azure_section.get("resource_group")),
        "azure.workspace_name": resolve("azure.workspace_name", azure_section.get("workspace_name")),
        "identity.resource_id": resolve("identity.resource_id", identity_section.get("resource_id")),
        "identity.client_id": resolve("identity.client_id", identity_section.get("client_id")),
        "model.name": resolve("model.name", model_section.get("name")),
        "endpoint.name": resolve("endpoint.name", endpoint_section.get("name")),
        "deployment.name": resolve("deployment.name", deployment_section.get("name")),
    }
    missing: List[str] = [key for key, value in required.items() if not value]
    if missing:
        hints = [
            f"{key} (or ${ENV_OVERRIDES[key]})" if key in ENV_OVERRIDES else key
            for key in missing
        ]
        raise ConfigurationError(
            "Missing required deployment settings: " + ", ".join(hints)
        )

    validate_resource_name("endpoint", required["endpoint.name"])
    validate_resource_name("deployment", required["deployment.name"])

    try:
        instance_count = int(deployment_section.get("instance_count", DEFAULT_INSTANCE_COUNT))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid instance_count: {exc}") from exc
    if instance_count < 1:
        raise ConfigurationError("deployment.instance_count must be at least 1")

    raw_env_vars = deployment_section.get("environment_variables") or {}
    if not isinstance(raw_env_vars, dict):
        raise ConfigurationError("deployment.environment_variables must be a mapping")

    training_job_name = resolve("model.training_job_name", model_section.get("training_job_name"))

    return DeploymentConfig(
        subscription_id=required["azure.subscription_id"],
        resource_group=required["azure.resource_group"],
        workspace_name=required["azure.workspace_name"],
        identity_resource_id=required["identity.resource_id"],
        identity_client_id=required["identity.client_id"],
        model_name=required["model.name"],
        endpoint_name=required["endpoint.name"],
        deployment_name=required["deployment.name"],
        endpoint_description=endpoint_section.get("description") or DEFAULT_ENDPOINT_DESCRIPTION,
        training_job_name=training_job_name,
        model_type=model_section.get("type") or DEFAULT_MODEL_TYPE,
        compute=ComputeSettings(
            instance_type=deployment_section.get("instance_type") or DEFAULT_INSTANCE_TYPE,
            instance_count=instance_count,
        ),
        environment_variables={str(k): str(v) for k, v in raw_env_vars.items()},
        request_settings=_build_request_settings(
            deployment_section.get("request_settings") or {}
        ),
        liveness_probe=_build_probe(
            deployment_section.get("liveness_probe") or {}, "liveness_probe"
        ),
        readiness_probe=_build_probe(
            deployment_section.get("readiness_probe") or {}, "readiness_probe"
        ),
        operation_timeout_seconds=parse_timeout(
            settings.get("operation_timeout_seconds", DEFAULT_OPERATION_TIMEOUT_SECONDS)
        ),
        tracking=TrackingConfig(
            enabled=_parse_flag(tracking_section.get("enabled", False), "tracking.enabled"),
            experiment_name=tracking_section.get("experiment_name") or DEFAULT_TRACKING_EXPERIMENT,
        ),
    )


def load_deployment_config(
    config_dir: Path,
    environ: Optional[Mapping[str, str]] = None,
) -> DeploymentConfig:
    """
    Load ``<config_dir>/deployment.yaml`` into a :class:`DeploymentConfig`.

    Azure coordinates not present in the environment are looked up in
    ``config.env`` in the project root (the parent of ``config_dir``).

    Raises:
        FileNotFoundError: If ``deployment.yaml`` does not exist.
        ConfigurationError: If required values are missing or malformed.
    """
    settings = load_yaml(config_dir / DEPLOYMENT_CONFIG_FILENAME)
    env_file_vars = load_env_file(config_dir.parent / CONFIG_ENV_FILENAME)
    return build_deployment_config(settings, env_file_vars=env_file_vars, environ=environ)
