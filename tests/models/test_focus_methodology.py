"""Tests for flow_cli.models.focus.methodology."""

from __future__ import annotations

import pytest

from flow_cli.models.config_models import AppConfig, PresetConfig
from flow_cli.models.focus.methodology import (
    METHODOLOGIES,
    SessionPreset,
    default_presets,
    for_methodology,
)


class TestForMethodology:
    def test_known_ids(self):
        for methodology in METHODOLOGIES:
            assert for_methodology(methodology).id == methodology

    def test_unknown_id_falls_back_to_pomodoro(self):
        assert for_methodology("kanban").id == "pomodoro"

    def test_is_pure(self):
        assert for_methodology("deepwork") == for_methodology("deepwork")

    def test_pomodoro_capabilities(self):
        d = for_methodology("pomodoro")
        assert not d.has_shutdown_ritual
        assert not d.has_focus_score
        assert not d.has_outcome_prompt
        assert not d.requires_laser_checklist
        assert not d.has_completion_prompts

    def test_deepwork_capabilities(self):
        d = for_methodology("deepwork")
        assert d.has_shutdown_ritual
        assert d.has_distraction_log
        assert d.has_outcome_prompt
        assert not d.has_focus_score
        assert d.deep_work_goal_hours == 4.0

    def test_maketime_capabilities(self):
        d = for_methodology("maketime")
        assert d.has_highlight
        assert d.requires_laser_checklist
        assert d.has_focus_score
        assert d.has_energize_reminder
        assert not d.has_shutdown_ritual

    def test_default_presets_used_without_config(self):
        d = for_methodology("deepwork")
        assert d.presets == default_presets("deepwork")
        assert d.presets[0] == SessionPreset("Deep", 90)

    def test_default_presets_used_for_empty_config_list(self):
        d = for_methodology("maketime", AppConfig())
        assert d.presets == default_presets("maketime")


class TestConfiguredPresets:
    def test_presets_override_defaults(self):
        config = AppConfig()
        config.pomodoro.presets = [PresetConfig(name="Sprint", minutes=20)]
        d = for_methodology("pomodoro", config)
        assert d.presets == (SessionPreset("Sprint", 20),)

    def test_more_than_three_presets_rejected(self):
        config = AppConfig()
        # Assignment skips the model validator, so the provider check is reached.
        config.deepwork.presets = [
            PresetConfig(name=f"P{i}", minutes=10 * i) for i in range(1, 5)
        ]
        with pytest.raises(ValueError, match="between 1 and 3"):
            for_methodology("deepwork", config)

    def test_goal_hours_from_config(self):
        config = AppConfig()
        config.deepwork.goal_hours = 6
        assert for_methodology("deepwork", config).deep_work_goal_hours == 6


class TestSessionPreset:
    def test_label(self):
        assert SessionPreset("Deep", 90).label == "Deep (90m)"
