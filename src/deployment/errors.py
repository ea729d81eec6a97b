"""Custom exceptions for the endpoint deployment workflow."""


class DeploymentWorkflowError(Exception):
    """Base exception for deployment workflow errors."""
    pass


class ConfigurationError(DeploymentWorkflowError):
    """Raised when deployment configuration is missing or invalid."""
    pass


class RegistrationError(DeploymentWorkflowError):
    """Raised when the training job output cannot be registered as a model.

    Not retried: the job reference or the job itself needs operator attention.
    """
    pass


class EndpointOperationError(DeploymentWorkflowError):
    """Raised when the platform rejects an endpoint create, delete or invoke."""
    pass


class DeploymentOperationError(DeploymentWorkflowError):
    """Raised when the platform rejects a deployment create/update."""
    pass


class TrafficUpdateError(DeploymentWorkflowError):
    """Raised when reading or updating endpoint traffic fails.

    The deployment exists at this point but does not receive traffic.
    """
    pass


class OperationTimeoutError(DeploymentWorkflowError):
    """Raised when a long-running platform operation outlives its timeout."""
    pass
