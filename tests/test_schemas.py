"""
Tests for request validation and structured-output schemas.
"""
import pytest
from pydantic import ValidationError

from omniforge.orchestration.enums import Modality
from omniforge.schemas import (
    AnalysisPayload,
    BlueprintPayload,
    FramePayload,
    MangaPlanPayload,
    ProductionRequest,
    MAX_PROMPT_LENGTH,
)


class TestProductionRequest:

    def test_valid_request(self):
        request = ProductionRequest(prompt="  eco coffee launch  ", modalities=["Image", "text"])

        assert request.prompt == "eco coffee launch"
        assert request.modalities == ["image", "text"]
        assert request.to_modalities() == [Modality.TEXT, Modality.IMAGE]

    def test_angle_brackets_removed(self):
        request = ProductionRequest(prompt="<script>coffee</script>")
        assert "<" not in request.prompt and ">" not in request.prompt

    def test_empty_prompt_rejected(self):
        with pytest.raises(ValidationError):
            ProductionRequest(prompt="   ")

    def test_prompt_too_long_rejected(self):
        with pytest.raises(ValidationError):
            ProductionRequest(prompt="x" * (MAX_PROMPT_LENGTH + 1))

    def test_empty_modalities_rejected(self):
        with pytest.raises(ValidationError):
            ProductionRequest(prompt="coffee", modalities=[])

    def test_unknown_modality_rejected(self):
        with pytest.raises(ValidationError):
            ProductionRequest(prompt="coffee", modalities=["text", "hologram"])

    def test_duplicate_modalities_collapsed(self):
        request = ProductionRequest(prompt="coffee", modalities=["audio", "AUDIO", "video"])
        assert request.modalities == ["audio", "video"]

    def test_auto_modalities(self):
        request = ProductionRequest(prompt="coffee")
        assert request.modalities is None
        assert request.to_modalities() is None


class TestPayloads:

    def test_analysis_accepts_camel_case(self):
        payload = AnalysisPayload.model_validate({
            "primaryIntent": "STORY",
            "contentTypes": {"text": True},
            "targetAudience": "  kids  ",
        })

        assert payload.primary_intent == "story"
        assert payload.content_types == {"text": True}
        assert payload.target_audience == "kids"

    def test_analysis_tolerates_wrong_types(self):
        payload = AnalysisPayload.model_validate({"contentTypes": "all of them", "tone": 7})

        assert payload.content_types == {}
        assert payload.tone is None
        assert payload.primary_intent == "general"

    def test_blueprint_blank_fields_become_none(self):
        payload = BlueprintPayload.model_validate({"title": "   ", "imagePrompt": "a cup"})

        assert payload.title is None
        assert payload.image_prompt == "a cup"

    @pytest.mark.parametrize("raw,expected", [(5, 5.0), ("2.5", 2.5), (0, None), (-3, None), ("soon", None)])
    def test_frame_duration(self, raw, expected):
        assert FramePayload(duration=raw).duration == expected

    def test_manga_plan_requires_pages(self):
        with pytest.raises(ValidationError):
            MangaPlanPayload.model_validate({"title": "T", "pages": []})

    def test_manga_unknown_layout_defaults_to_double(self):
        plan = MangaPlanPayload.model_validate({
            "pages": [{"pageNumber": 1, "layout": "octagon", "panels": [{"description": "hero"}]}],
        })

        assert plan.pages[0].layout == "double"
        assert plan.pages[0].panels[0].description == "hero"
