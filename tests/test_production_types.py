"""
Tests for production type detection and templates.
"""
import pytest

from omniforge.orchestration.enums import Modality, ProductionType, TaskStatus
from omniforge.orchestration.models import GenerationTask, ProductionRun
from omniforge.orchestration.production_types import (
    PRODUCTION_TEMPLATES,
    detect_production_type,
    get_template,
)


class TestDetectProductionType:

    @pytest.mark.parametrize("prompt,expected", [
        ("A shonen MANGA about a ramen chef", ProductionType.MANGA),
        ("graphic novel set on Mars", ProductionType.MANGA),
        ("music video for a synthwave track", ProductionType.MUSIC_VIDEO),
        ("music with strong visual identity", ProductionType.MUSIC_VIDEO),
        ("weekly podcast on urban gardening", ProductionType.PODCAST),
        ("product launch for a smart kettle", ProductionType.MARKETING_CAMPAIGN),
        ("promote our brand to students", ProductionType.MARKETING_CAMPAIGN),
        ("teach kids about volcanoes", ProductionType.EDUCATIONAL_COURSE),
        ("a bedtime tale about a fox", ProductionType.STORY),
        ("launch campaign for eco coffee brand", ProductionType.GENERAL),
        ("", ProductionType.GENERAL),
    ])
    def test_keywords(self, prompt, expected):
        assert detect_production_type(prompt) == expected

    def test_earlier_rule_wins(self):
        assert detect_production_type("a comic story") == ProductionType.MANGA
        assert detect_production_type("a podcast course") == ProductionType.PODCAST


class TestProductionTemplate:

    def test_every_type_has_a_template(self):
        for production_type in ProductionType:
            assert get_template(production_type).type == production_type
        assert set(PRODUCTION_TEMPLATES) == set(ProductionType)

    def test_optional_components_are_not_required(self):
        template = get_template(ProductionType.STORY)

        assert template.required_modalities == [Modality.TEXT, Modality.IMAGE]
        assert template.modalities == [Modality.TEXT, Modality.IMAGE, Modality.AUDIO]
        assert template.is_complete([Modality.IMAGE, Modality.TEXT])

    def test_missing_components_named(self):
        template = get_template(ProductionType.PODCAST)

        assert template.missing_components([Modality.TEXT]) == ["Cover Art", "Narration"]
        assert template.is_complete([Modality.TEXT]) is False


def finished_run(production_type, outcomes):
    run = ProductionRun(prompt="x", production_type=production_type)
    for modality, ok in outcomes.items():
        task = GenerationTask(modality=modality)
        task.start()
        if ok:
            task.succeed({"ok": True})
        else:
            task.fail("down")
        run.tasks.append(task)
    return run


class TestRunMeetsTemplate:

    def test_all_required_succeeded(self):
        run = finished_run(ProductionType.GENERAL, {Modality.TEXT: True, Modality.IMAGE: True})

        assert run.meets_template is True
        assert run.to_dict()["production_type"] == "general"
        assert run.to_dict()["missing_components"] == []

    def test_failed_required_modality(self):
        run = finished_run(ProductionType.MUSIC_VIDEO, {
            Modality.TEXT: True, Modality.IMAGE: True, Modality.VIDEO: False,
        })

        assert run.task(Modality.VIDEO).status == TaskStatus.FAILED
        assert run.meets_template is False
        assert run.missing_components == ["Storyboard"]

    def test_unfinished_run_does_not_meet_template(self):
        run = ProductionRun(prompt="x")

        assert run.meets_template is False
