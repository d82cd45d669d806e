"""Orchestrator package - coordinates upload cycles and retries."""
from .core import BatchCycleResult, BatchUploadOrchestrator
from .retry import RetryCoordinator

__all__ = ["BatchUploadOrchestrator", "BatchCycleResult", "RetryCoordinator"]
