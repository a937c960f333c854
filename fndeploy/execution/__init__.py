"""Execution layer: retry policy, failure classification and orchestration."""

from fndeploy.execution.failure_classifier import FailureKind, classify_failure, is_transient
from fndeploy.execution.orchestrator import DeploymentOrchestrator
from fndeploy.execution.retry import RetryPolicy, retry_async

__all__ = [
    "DeploymentOrchestrator",
    "FailureKind",
    "RetryPolicy",
    "classify_failure",
    "is_transient",
    "retry_async",
]
