"""
Orchestration Layer.

Turns one prompt into a multi-modal production:
analysis -> blueprint -> concurrent per-modality generation -> persistence.
"""
from .enums import Modality, TaskStatus, RunStage, PrimaryIntent, ProductionType
from .exceptions import (
    OrchestrationError,
    ProductionValidationError,
    AnalysisError,
    BlueprintError,
    ModalityGenerationError,
    PersistenceError,
    InvalidTaskTransition,
)
from .models import PromptAnalysis, Blueprint, GenerationTask, ProgressEvent, ProductionRun
from .production_types import (
    TemplateComponent,
    ProductionTemplate,
    PRODUCTION_TEMPLATES,
    detect_production_type,
    get_template,
)
from .progress import BaseProgressStore, InMemoryProgressStore, ProgressListener, get_progress_store
from .prompt_analyzer import PromptAnalyzer, default_analysis
from .blueprint import BlueprintBuilder, fallback_blueprint
from .orchestrator import ProductionOrchestrator, get_production_orchestrator

__all__ = [
    "Modality",
    "TaskStatus",
    "RunStage",
    "PrimaryIntent",
    "ProductionType",
    "OrchestrationError",
    "ProductionValidationError",
    "AnalysisError",
    "BlueprintError",
    "ModalityGenerationError",
    "PersistenceError",
    "InvalidTaskTransition",
    "PromptAnalysis",
    "Blueprint",
    "GenerationTask",
    "ProgressEvent",
    "ProductionRun",
    "TemplateComponent",
    "ProductionTemplate",
    "PRODUCTION_TEMPLATES",
    "detect_production_type",
    "get_template",
    "BaseProgressStore",
    "InMemoryProgressStore",
    "ProgressListener",
    "get_progress_store",
    "PromptAnalyzer",
    "default_analysis",
    "BlueprintBuilder",
    "fallback_blueprint",
    "ProductionOrchestrator",
    "get_production_orchestrator",
]
