"""Tests for refocus/config.py"""

import pytest

from refocus import CONFIG_PATH, PROJECT_ROOT
from refocus.config import GateConfig, RefocusConfig, StorageConfig, load_config


class TestRefocusConfig:
    def test_defaults(self):
        config = RefocusConfig()
        assert config.detection.planning_loop.min_occurrences == 3
        assert config.detection.planning_loop.min_duration_seconds == 900
        assert config.detection.research_rabbit_hole.max_gap_seconds == 300
        assert config.gate.cooldown_minutes.off_track == 15
        assert config.learning.min_adaptation_confidence == 0.7
        assert config.loop.retention_days == 90

    def test_valid_overrides(self):
        config = RefocusConfig(
            detection={"planning_loop": {"min_occurrences": 5}},
            loop={"intervention_enabled": False},
        )
        assert config.detection.planning_loop.min_occurrences == 5
        assert config.detection.planning_loop.window_minutes == 30
        assert config.loop.intervention_enabled is False

    def test_extra_keys_allowed(self):
        config = RefocusConfig(gate={"snooze_minutes": 10})
        assert config.gate.default_cooldown_minutes == 30

    def test_invalid_values_rejected(self):
        with pytest.raises(ValueError):
            RefocusConfig(learning={"min_adaptation_confidence": 1.5})
        with pytest.raises(ValueError):
            GateConfig(prompt_timeout_seconds=0)


class TestStorageConfig:
    def test_relative_paths_resolve_under_project(self):
        assert StorageConfig().resolve("data/activity.db") == PROJECT_ROOT / "data" / "activity.db"

    def test_absolute_paths_kept(self, tmp_path):
        target = tmp_path / "activity.db"
        assert StorageConfig().resolve(str(target)) == target


class TestLoadConfig:
    def test_shipped_file_matches_defaults(self):
        assert load_config(CONFIG_PATH) == RefocusConfig()

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") == RefocusConfig()

    def test_reads_nested_section(self, tmp_path):
        path = tmp_path / "refocus.yaml"
        path.write_text("refocus:\n  loop:\n    poll_interval_seconds: 1.5\n")

        assert load_config(path).loop.poll_interval_seconds == 1.5

    def test_partial_cooldowns_keep_other_defaults(self, tmp_path):
        path = tmp_path / "refocus.yaml"
        path.write_text("refocus:\n  gate:\n    cooldown_minutes:\n      planning_loop: 45\n      shiny_object: 5\n")

        cooldowns = load_config(path).gate.cooldown_minutes

        assert cooldowns.minutes_for("planning_loop") == 45
        assert cooldowns.minutes_for("context_switching") == 15
        assert cooldowns.minutes_for("off_track") == 15
        assert cooldowns.minutes_for("shiny_object") == 5
        assert cooldowns.minutes_for("unknown") is None

    def test_invalid_file_falls_back(self, tmp_path):
        path = tmp_path / "refocus.yaml"
        path.write_text("refocus:\n  learning:\n    min_history_for_adaptation: 0\n")

        assert load_config(path) == RefocusConfig()
