"""
Production data models.

PromptAnalysis and Blueprint are derived once per run. GenerationTask is the
per-modality slot written only by its own task. ProductionRun aggregates the
slots in fixed modality order.
"""
import uuid
from datetime import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .enums import Modality, TaskStatus, RunStage, PrimaryIntent, ProductionType
from .exceptions import InvalidTaskTransition
from .production_types import ProductionTemplate, get_template


@dataclass(frozen=True)
class PromptAnalysis:
    """Classification of a prompt. Immutable once derived."""
    primary_intent: PrimaryIntent = PrimaryIntent.GENERAL
    content_types: Dict[Modality, bool] = field(default_factory=dict)
    style: str = "creative"
    tone: str = "professional"
    target_audience: str = "general audience"
    suggested_formats: Dict[str, Any] = field(default_factory=dict)
    enhanced_prompts: Dict[Modality, str] = field(default_factory=dict)
    is_default: bool = False

    @property
    def selected_modalities(self) -> List[Modality]:
        """Modalities flagged true, in reporting order."""
        return [m for m in Modality if self.content_types.get(m)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary_intent": self.primary_intent.value,
            "content_types": {m.value: bool(v) for m, v in self.content_types.items()},
            "style": self.style,
            "tone": self.tone,
            "target_audience": self.target_audience,
            "suggested_formats": dict(self.suggested_formats),
            "enhanced_prompts": {m.value: v for m, v in self.enhanced_prompts.items()},
            "is_default": self.is_default,
        }


@dataclass
class Blueprint:
    """Structured creative brief with per-modality prompts."""
    title: str
    summary: str
    tone: str
    text_brief: str
    image_prompt: str
    audio_narration: str
    video_storyboard_concept: str
    keywords: List[str] = field(default_factory=list)
    used_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "tone": self.tone,
            "text_brief": self.text_brief,
            "image_prompt": self.image_prompt,
            "audio_narration": self.audio_narration,
            "video_storyboard_concept": self.video_storyboard_concept,
            "keywords": list(self.keywords),
        }

    def to_brief_json(self) -> Dict[str, Any]:
        """The brief as handed to the text model (camelCase keys)."""
        return {
            "title": self.title,
            "summary": self.summary,
            "tone": self.tone,
            "textBrief": self.text_brief,
            "imagePrompt": self.image_prompt,
            "audioNarration": self.audio_narration,
            "videoStoryboardConcept": self.video_storyboard_concept,
            "keywords": list(self.keywords),
        }


@dataclass
class GenerationTask:
    """
    One modality's unit of work.

    Transitions are Pending -> Running -> Success | Failed. Success carries a
    result and no error; Failed carries an error and no result.
    """
    modality: Modality
    prompt: str = ""
    status: TaskStatus = TaskStatus.PENDING
    result: Optional[Any] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def start(self):
        if self.status != TaskStatus.PENDING:
            raise InvalidTaskTransition(f"{self.modality.value}: cannot start from {self.status.value}")
        self.status = TaskStatus.RUNNING
        self.started_at = datetime.utcnow()

    def succeed(self, result: Any):
        if self.status != TaskStatus.RUNNING:
            raise InvalidTaskTransition(f"{self.modality.value}: cannot succeed from {self.status.value}")
        if result is None:
            raise InvalidTaskTransition(f"{self.modality.value}: success requires a result")
        self.status = TaskStatus.SUCCESS
        self.result = result
        self.error = None
        self.finished_at = datetime.utcnow()

    def fail(self, error: str):
        if self.status != TaskStatus.RUNNING:
            raise InvalidTaskTransition(f"{self.modality.value}: cannot fail from {self.status.value}")
        self.status = TaskStatus.FAILED
        self.result = None
        self.error = error or "Unknown error"
        self.finished_at = datetime.utcnow()

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        result = self.result
        if result is not None and hasattr(result, "to_dict"):
            result = result.to_dict()
        return {
            "modality": self.modality.value,
            "status": self.status.value,
            "result": result,
            "error": self.error,
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class ProgressEvent:
    """One entry of a run's append-only progress log."""
    stage: str
    percent: int
    message: str
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "percent": self.percent,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ProductionRun:
    """A single orchestrated production triggered by one prompt."""
    prompt: str
    id: str = field(default_factory=lambda: f"prod-{uuid.uuid4().hex[:12]}")
    stage: RunStage = RunStage.CREATED
    production_type: ProductionType = ProductionType.GENERAL
    analysis: Optional[PromptAnalysis] = None
    blueprint: Optional[Blueprint] = None
    tasks: List[GenerationTask] = field(default_factory=list)
    assets: Dict[Modality, Any] = field(default_factory=dict)
    persistence_errors: Dict[Modality, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def modalities(self) -> List[Modality]:
        return [task.modality for task in self.tasks]

    @property
    def errors(self) -> Dict[Modality, str]:
        """Failed modality -> error message."""
        return {
            task.modality: task.error
            for task in self.tasks
            if task.status == TaskStatus.FAILED
        }

    @property
    def is_complete(self) -> bool:
        return bool(self.tasks) and all(task.is_terminal for task in self.tasks)

    @property
    def template(self) -> ProductionTemplate:
        return get_template(self.production_type)

    @property
    def missing_components(self) -> List[str]:
        """Required template components with no successful task."""
        return self.template.missing_components(task.modality for task in self.succeeded())

    @property
    def meets_template(self) -> bool:
        return self.is_complete and not self.missing_components

    def task(self, modality: Modality) -> Optional[GenerationTask]:
        for task in self.tasks:
            if task.modality == modality:
                return task
        return None

    def succeeded(self) -> List[GenerationTask]:
        return [task for task in self.tasks if task.status == TaskStatus.SUCCESS]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "stage": self.stage.value,
            "production_type": self.production_type.value,
            "meets_template": self.meets_template,
            "missing_components": self.missing_components,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "blueprint": self.blueprint.to_dict() if self.blueprint else None,
            "tasks": [task.to_dict() for task in self.tasks],
            "errors": {m.value: e for m, e in self.errors.items()},
            "assets": {
                m.value: (a.to_dict() if hasattr(a, "to_dict") else a)
                for m, a in self.assets.items()
            },
            "persistence_errors": {m.value: e for m, e in self.persistence_errors.items()},
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
