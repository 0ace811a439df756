"""
Orchestration exceptions.
"""


class OrchestrationError(Exception):
    """Base exception for production orchestration."""
    pass


class ProductionValidationError(OrchestrationError):
    """Request rejected before any stage started."""
    pass


class AnalysisError(OrchestrationError):
    """Prompt analysis failed. Always recovered to the default analysis."""
    pass


class BlueprintError(OrchestrationError):
    """Blueprint derivation failed. Always recovered to the fallback blueprint."""
    pass


class ModalityGenerationError(OrchestrationError):
    """A single modality task failed. Recorded on the task, never propagated."""

    def __init__(self, modality: str, message: str):
        self.modality = modality
        self.message = message
        super().__init__(f"{modality}: {message}")


class PersistenceError(OrchestrationError):
    """Persisting one finished asset failed."""

    def __init__(self, modality: str, message: str):
        self.modality = modality
        self.message = message
        super().__init__(f"{modality}: {message}")


class InvalidTaskTransition(OrchestrationError):
    """A generation task was moved out of order (e.g. Success -> Running)."""
    pass
