"""
Production Orchestrator - One prompt in, a multi-modal production out.

Stages:
1. ANALYZING   - classify the prompt, pick modalities (PromptAnalyzer)
2. PLANNING    - derive the creative blueprint (BlueprintBuilder) and compose
                 one prompt per modality
3. GENERATING  - one concurrent task per modality, full barrier join
4. FINALIZING  - persist each successful result, sequentially
5. COMPLETE

Each task catches its own errors and writes only its own GenerationTask, so
one modality failing never touches another. start_production() always returns
a ProductionRun; it raises only ProductionValidationError, before any stage.
"""
import asyncio
import json
import logging
from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from omniforge.persistence.assets_repo import AssetDraft, BaseAssetRepository
from omniforge.schemas import ProductionRequest
from omniforge.services.dalle_service import DalleService
from omniforge.services.llm_service import LLMService
from omniforge.services.storyboard_service import StoryboardService
from omniforge.services.tts_service import TTSService

from .blueprint import BlueprintBuilder
from .enums import Modality, RunStage
from .exceptions import ModalityGenerationError, ProductionValidationError
from .models import Blueprint, GenerationTask, ProductionRun, ProgressEvent, PromptAnalysis
from .production_types import detect_production_type
from .progress import BaseProgressStore, get_progress_store
from .prompt_analyzer import PromptAnalyzer

logger = logging.getLogger(__name__)

# Progress checkpoints (percent)
PROGRESS_ANALYZING = 5
PROGRESS_PLANNING = 15
PROGRESS_BLUEPRINT_READY = 25
PROGRESS_GENERATING = 30
PROGRESS_GENERATION_SPAN = 60
PROGRESS_FINALIZING = 92
PROGRESS_COMPLETE = 100

TEXT_SYSTEM_PROMPT = "You are a world-class creative director crafting launch-ready marketing prose."

TEXT_INSTRUCTIONS = (
    "Using the creative brief below, write a polished, publication-ready narrative "
    "(400-700 words). Match the desired tone and weave in the keywords organically."
)


def compose_text_prompt(blueprint: Blueprint, analysis: Optional[PromptAnalysis], prompt: str) -> str:
    """Writing instructions plus the brief as JSON."""
    text_prompt = f"{TEXT_INSTRUCTIONS}\n\nBrief:\n{json.dumps(blueprint.to_brief_json(), indent=2, ensure_ascii=False)}"
    if analysis:
        direction = analysis.enhanced_prompts.get(Modality.TEXT)
        if direction and direction.strip() != prompt.strip():
            text_prompt += f"\n\nAdditional direction: {direction}"
    return text_prompt


def compose_image_prompt(blueprint: Blueprint, analysis: Optional[PromptAnalysis]) -> str:
    """Blueprint image prompt with tone and keywords appended."""
    image_prompt = (
        f"{blueprint.image_prompt}\n\n"
        f"Tone: {blueprint.tone}\n"
        f"Keywords: {', '.join(blueprint.keywords)}"
    )
    if analysis:
        image_style = analysis.suggested_formats.get("imageStyle")
        if isinstance(image_style, str) and image_style.strip():
            image_prompt += f"\nStyle: {image_style.strip()}"
    return image_prompt


def compose_prompts(
    blueprint: Blueprint,
    analysis: Optional[PromptAnalysis],
    prompt: str,
) -> Dict[Modality, str]:
    """Per-modality generation prompts derived from the blueprint."""
    return {
        Modality.TEXT: compose_text_prompt(blueprint, analysis, prompt),
        Modality.IMAGE: compose_image_prompt(blueprint, analysis),
        Modality.AUDIO: blueprint.audio_narration,
        Modality.VIDEO: blueprint.video_storyboard_concept,
    }


class ProductionOrchestrator:
    """
    Drives production runs.

    Every collaborator is injectable; omitted ones are built from the global
    config. `asset_repository=None` skips persistence entirely.

    Finished runs beyond `max_retained_runs` (oldest first) are forgotten
    together with their progress logs; a value <= 0 keeps every run.
    """

    def __init__(
        self,
        llm: Optional[LLMService] = None,
        images: Optional[DalleService] = None,
        speech: Optional[TTSService] = None,
        storyboards: Optional[StoryboardService] = None,
        analyzer: Optional[PromptAnalyzer] = None,
        blueprint_builder: Optional[BlueprintBuilder] = None,
        progress_store: Optional[BaseProgressStore] = None,
        asset_repository: Optional[BaseAssetRepository] = None,
        task_timeout_seconds: Optional[float] = None,
        max_retained_runs: Optional[int] = None,
    ):
        from omniforge.config import config

        self.llm = llm or LLMService()
        self.images = images or DalleService()
        self.speech = speech or TTSService()
        self.storyboards = storyboards or StoryboardService(llm=self.llm)
        self.analyzer = analyzer or PromptAnalyzer(llm=self.llm)
        self.blueprint_builder = blueprint_builder or BlueprintBuilder(llm=self.llm)
        self.progress_store = progress_store or get_progress_store()
        self.asset_repository = asset_repository

        if task_timeout_seconds is None:
            task_timeout_seconds = config.production.task_timeout_seconds
        self.task_timeout_seconds = task_timeout_seconds

        if max_retained_runs is None:
            max_retained_runs = config.production.max_retained_runs
        self.max_retained_runs = max_retained_runs

        self.image_width, self.image_height = config.production.image_dimensions
        self.storyboard_frames = config.production.storyboard_frames
        self.storyboard_duration = config.production.storyboard_duration

        self._runs: "OrderedDict[str, ProductionRun]" = OrderedDict()

        logger.info("[ORCHESTRATOR] Production orchestrator initialized")

    # ═══════════════════════════════════════════════════════════════════
    # PUBLIC API
    # ═══════════════════════════════════════════════════════════════════

    async def start_production(
        self,
        prompt: str,
        modalities: Optional[Iterable[Union[Modality, str]]] = None,
        voice: Optional[str] = None,
    ) -> ProductionRun:
        """
        Run a complete production.

        Args:
            prompt: Free-form creative prompt
            modalities: Modalities to generate; None lets the analyzer decide
            voice: Narration voice for the audio modality

        Returns:
            Completed ProductionRun (individual tasks may have failed)

        Raises:
            ProductionValidationError: empty prompt, empty or unknown modalities
        """
        request = self.validate_request(prompt, modalities, voice)

        run = ProductionRun(prompt=request.prompt)
        self._retain(run)

        logger.info("=" * 70)
        logger.info(f"[ORCHESTRATOR] STARTING PRODUCTION {run.id}")
        logger.info("=" * 70)
        logger.info(f"  Prompt: {request.prompt[:100]}")
        if request.modalities:
            logger.info(f"  Modalities: {', '.join(request.modalities)}")
        else:
            logger.info("  Modalities: auto")
        logger.info("=" * 70)

        # ═══════════════════════════════════════════════════════════════════
        # PHASE 1: ANALYZING
        # ═══════════════════════════════════════════════════════════════════
        self._advance(run, RunStage.ANALYZING, PROGRESS_ANALYZING, "Analyzing prompt")
        run.production_type = detect_production_type(request.prompt)
        run.analysis = await self.analyzer.analyze(request.prompt)

        selected = request.to_modalities() if request.modalities else run.analysis.selected_modalities
        if not selected:
            selected = [Modality.TEXT, Modality.IMAGE]
        run.tasks = [GenerationTask(modality=m) for m in Modality.ordered(selected)]

        # ═══════════════════════════════════════════════════════════════════
        # PHASE 2: PLANNING
        # ═══════════════════════════════════════════════════════════════════
        self._advance(run, RunStage.PLANNING, PROGRESS_PLANNING, "Building creative blueprint")
        run.blueprint = await self.blueprint_builder.build_blueprint(request.prompt)

        prompts = compose_prompts(run.blueprint, run.analysis, request.prompt)
        for task in run.tasks:
            task.prompt = prompts[task.modality]

        self.progress_store.update(
            run.id, RunStage.PLANNING.value, PROGRESS_BLUEPRINT_READY,
            f"Blueprint ready: {run.blueprint.title[:80]}",
        )

        # ═══════════════════════════════════════════════════════════════════
        # PHASE 3: GENERATING
        # ═══════════════════════════════════════════════════════════════════
        self._advance(
            run, RunStage.GENERATING, PROGRESS_GENERATING,
            f"Generating {len(run.tasks)} modalities",
        )
        await self._generate_all(run, voice=request.voice)

        # ═══════════════════════════════════════════════════════════════════
        # PHASE 4: FINALIZING
        # ═══════════════════════════════════════════════════════════════════
        self._advance(run, RunStage.FINALIZING, PROGRESS_FINALIZING, "Saving assets")
        self._persist_assets(run)

        # ═══════════════════════════════════════════════════════════════════
        # COMPLETE
        # ═══════════════════════════════════════════════════════════════════
        run.completed_at = datetime.utcnow()
        succeeded = len(run.succeeded())
        self._advance(
            run, RunStage.COMPLETE, PROGRESS_COMPLETE,
            f"Production complete: {succeeded}/{len(run.tasks)} modalities succeeded",
        )

        logger.info("=" * 70)
        logger.info(f"[ORCHESTRATOR] PRODUCTION {run.id} COMPLETE")
        logger.info("=" * 70)
        logger.info(f"  Title: {run.blueprint.title[:80]}")
        logger.info(f"  Type: {run.production_type.value}")
        for task in run.tasks:
            logger.info(f"  {task.modality.value}: {task.status.value.upper()}")
        if run.errors:
            logger.info(f"  Failed: {', '.join(m.value for m in run.errors)}")
        if run.persistence_errors:
            logger.info(f"  Not persisted: {', '.join(m.value for m in run.persistence_errors)}")
        if run.missing_components:
            logger.info(f"  Missing components: {', '.join(run.missing_components)}")
        logger.info("=" * 70)

        return run

    def get_progress(self, run_id: str) -> Optional[ProgressEvent]:
        """Latest progress event for a run."""
        return self.progress_store.get_latest(run_id)

    def get_progress_history(self, run_id: str) -> List[ProgressEvent]:
        """Full progress log for a run, oldest first."""
        return self.progress_store.get_history(run_id)

    def get_run(self, run_id: str) -> Optional[ProductionRun]:
        return self._runs.get(run_id)

    def forget_run(self, run_id: str) -> None:
        """Drop a run and its progress log."""
        self._runs.pop(run_id, None)
        self.progress_store.clear(run_id)

    def _retain(self, run: ProductionRun):
        self._runs[run.id] = run
        if self.max_retained_runs <= 0:
            return

        excess = len(self._runs) - self.max_retained_runs
        if excess <= 0:
            return

        # In-flight runs are never evicted
        finished = [rid for rid, r in self._runs.items() if r.stage == RunStage.COMPLETE]
        for run_id in finished[:excess]:
            logger.debug(f"[ORCHESTRATOR] Evicting finished run {run_id}")
            self.forget_run(run_id)

    @staticmethod
    def validate_request(
        prompt: str,
        modalities: Optional[Iterable[Union[Modality, str]]] = None,
        voice: Optional[str] = None,
    ) -> ProductionRequest:
        """Validate inputs into a ProductionRequest or raise ProductionValidationError."""
        names = None
        if modalities is not None:
            names = [m.value if isinstance(m, Modality) else str(m) for m in modalities]
        try:
            return ProductionRequest(prompt=prompt, modalities=names, voice=voice)
        except ValidationError as e:
            messages = "; ".join(err["msg"] for err in e.errors())
            raise ProductionValidationError(messages) from e

    async def close(self):
        """Close every adapter's HTTP client."""
        await self.llm.close()
        await self.images.close()
        await self.speech.close()

    # ═══════════════════════════════════════════════════════════════════
    # GENERATION
    # ═══════════════════════════════════════════════════════════════════

    async def _generate_all(self, run: ProductionRun, voice: Optional[str] = None):
        """Fan out one task per modality and wait for every one of them."""
        total = len(run.tasks)
        completed = 0

        async def run_task(task: GenerationTask):
            nonlocal completed
            await self._run_task(task, run, voice)
            completed += 1
            percent = PROGRESS_GENERATING + int(PROGRESS_GENERATION_SPAN * completed / total)
            self.progress_store.update(
                run.id, RunStage.GENERATING.value, percent,
                f"{task.modality.display_name} {task.status.value} ({completed}/{total})",
            )

        await asyncio.gather(*(run_task(task) for task in run.tasks))

    async def _run_task(self, task: GenerationTask, run: ProductionRun, voice: Optional[str]):
        """Run one modality. Every error ends up on the task, none propagate."""
        modality = task.modality
        task.start()
        logger.info(f"[ORCHESTRATOR] {modality.value}: started")

        try:
            result = await self._await_with_deadline(modality, self._dispatch(task, voice))
            if result is None:
                raise ModalityGenerationError(modality.value, "Adapter returned no result")
        except Exception as e:
            error = e if isinstance(e, ModalityGenerationError) else ModalityGenerationError(modality.value, str(e))
            logger.error(f"[ORCHESTRATOR] {modality.value} failed: {error.message}")
            task.fail(error.message)
            return

        task.succeed(result)
        logger.info(f"[ORCHESTRATOR] {modality.value}: success")

    async def _await_with_deadline(self, modality: Modality, call):
        """
        Await an adapter call under the per-task deadline.

        Only an expired deadline is reported as a timeout; a TimeoutError the
        adapter raises itself propagates like any other adapter error.
        """
        if not (self.task_timeout_seconds and self.task_timeout_seconds > 0):
            return await call

        pending = asyncio.ensure_future(call)
        try:
            done, _ = await asyncio.wait({pending}, timeout=self.task_timeout_seconds)
        finally:
            if not pending.done():
                pending.cancel()

        if not done:
            await asyncio.gather(pending, return_exceptions=True)
            raise ModalityGenerationError(
                modality.value,
                f"{modality.value} generation timed out after {self.task_timeout_seconds:g}s",
            )
        return pending.result()

    def _dispatch(self, task: GenerationTask, voice: Optional[str]):
        """Coroutine for the adapter call that serves this modality."""
        if task.modality == Modality.TEXT:
            return self.llm.generate_text(
                prompt=task.prompt,
                system_prompt=TEXT_SYSTEM_PROMPT,
                temperature=0.75,
                max_tokens=2000,
            )
        if task.modality == Modality.IMAGE:
            return self.images.generate_image(
                prompt=task.prompt,
                width=self.image_width,
                height=self.image_height,
            )
        if task.modality == Modality.AUDIO:
            return self.speech.generate_speech(text=task.prompt, voice=voice)
        if task.modality == Modality.VIDEO:
            return self.storyboards.generate_storyboard(
                concept=task.prompt,
                number_of_frames=self.storyboard_frames,
                duration=self.storyboard_duration,
            )
        raise ModalityGenerationError(task.modality.value, "No adapter for modality")

    # ═══════════════════════════════════════════════════════════════════
    # PERSISTENCE
    # ═══════════════════════════════════════════════════════════════════

    def _persist_assets(self, run: ProductionRun):
        """One create_asset call per successful task, in modality order."""
        if self.asset_repository is None:
            return

        metadata = {
            "blueprint": run.blueprint.to_dict() if run.blueprint else None,
            "original_prompt": run.prompt,
        }

        for task in run.succeeded():
            draft = AssetDraft(
                run_id=run.id,
                type=task.modality.value,
                title=self._asset_title(run, task.modality),
                input_prompt=task.prompt,
                output_data=self._serialize_result(task.result),
                metadata=dict(metadata),
            )
            try:
                run.assets[task.modality] = self.asset_repository.create_asset(draft)
            except Exception as e:
                logger.error(f"[ORCHESTRATOR] Failed to persist {task.modality.value} asset: {e}")
                run.persistence_errors[task.modality] = str(e)

    @staticmethod
    def _asset_title(run: ProductionRun, modality: Modality) -> str:
        title = run.blueprint.title if run.blueprint else run.prompt[:80]
        return f"{title} - {modality.display_name}"

    @staticmethod
    def _serialize_result(result: Any) -> Dict[str, Any]:
        if hasattr(result, "to_dict"):
            return result.to_dict()
        if isinstance(result, dict):
            return result
        return {"value": result}

    def _advance(self, run: ProductionRun, stage: RunStage, percent: int, message: str):
        run.stage = stage
        self.progress_store.update(run.id, stage.value, percent, message)
        logger.info(f"[ORCHESTRATOR] {run.id} {stage.value.upper()} ({percent}%): {message}")


# Singleton instance
_orchestrator: Optional[ProductionOrchestrator] = None


def get_production_orchestrator() -> ProductionOrchestrator:
    """Get or create the production orchestrator singleton."""
    global _orchestrator
    if _orchestrator is None:
        from omniforge.persistence.assets_repo import get_asset_repository
        _orchestrator = ProductionOrchestrator(asset_repository=get_asset_repository())
    return _orchestrator
