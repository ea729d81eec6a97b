"""Outcome record of a successful deployment run."""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class DeploymentResult:
    """Identifiers of everything a successful run left live on the platform."""

    model_id: str
    model_name: str
    model_version: str
    model_path: str
    endpoint_name: str
    deployment_name: str
    training_job_name: str
    traffic: Dict[str, int] = field(default_factory=dict)
    scoring_uri: Optional[str] = None
