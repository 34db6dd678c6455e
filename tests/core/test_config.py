"""Tests for helm.core.config."""

import dataclasses

import pytest

from helm.core.config import (
    DEFAULT_SCOUT_INSTRUCTIONS,
    DEFAULT_WITNESS_INSTRUCTIONS,
    AgentConfig,
    AssistantConfig,
    ContinuationConfig,
    SessionConfig,
)


class TestModelConfigs:
    """Tests for the model settings."""

    def test_continuation_defaults(self):
        cfg = ContinuationConfig()
        assert cfg.engine_type == "anthropic"
        assert cfg.model_name == "claude-3-5-sonnet-latest"
        assert cfg.temperature == 1.0
        assert cfg.top_p == 1.0
        assert cfg.branching_factor == 3
        assert cfg.cli_sim is True

    def test_assistant_runs_cooler(self):
        cfg = AssistantConfig()
        assert cfg.temperature == 0.3
        assert cfg.max_tokens == 512


class TestSessionConfig:
    """Tests for SessionConfig."""

    def test_defaults(self):
        cfg = SessionConfig()
        assert len(cfg.id) == 12
        assert isinstance(cfg.continuations, ContinuationConfig)
        assert isinstance(cfg.assistant, AssistantConfig)
        assert cfg.trees_dir == "trees"
        assert cfg.max_retries == 3
        assert cfg.retry_base_delay == 1.0

    def test_copilot_off_by_default(self):
        cfg = SessionConfig()
        assert cfg.copilot.enabled is False
        assert cfg.copilot.vision == 3

    def test_nested_configs_are_independent(self):
        cfg1 = SessionConfig()
        cfg2 = SessionConfig()
        cfg1.continuations.max_tokens = 10
        assert cfg2.continuations.max_tokens == 64


class TestAgentConfig:
    """Tests for AgentConfig."""

    def test_defaults(self):
        cfg = AgentConfig()
        assert cfg.type == "Scout"
        assert cfg.instructions == DEFAULT_SCOUT_INSTRUCTIONS
        assert (cfg.vision, cfg.range, cfg.depth) == (3, 2, 3)
        assert (cfg.cycles, cfg.prongs, cfg.tries) == (3, 3, 3)
        assert cfg.id.startswith("agent_")

    def test_frozen(self):
        cfg = AgentConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.depth = 10

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            AgentConfig(type="Sniper")

    def test_range_without_shotgun(self):
        cfg = AgentConfig(range=2, shotgun_layers=2, shotgun_ranges=(5, 4))
        assert cfg.range_at(0) == 2

    def test_shotgun_overrides_first_layers(self):
        cfg = AgentConfig(range=2, shotgun_enabled=True, shotgun_layers=2, shotgun_ranges=(5, 4, 9))
        assert [cfg.range_at(level) for level in range(4)] == [5, 4, 2, 2]

    def test_shotgun_short_ranges_fall_back(self):
        cfg = AgentConfig(range=2, shotgun_enabled=True, shotgun_layers=3, shotgun_ranges=(6,))
        assert [cfg.range_at(level) for level in range(3)] == [6, 2, 2]

    def test_scout_phase_falls_back_to_parent(self):
        cfg = AgentConfig(type="Campaign", vision=4, range=3, depth=5, campaign_scout_depth=2)
        scout = cfg.scout_phase()
        assert scout.type == "Scout"
        assert (scout.vision, scout.range, scout.depth) == (4, 3, 2)
        assert scout.instructions == cfg.instructions
        assert cfg.type == "Campaign"

    def test_witness_phase_overrides(self):
        cfg = AgentConfig(type="Campaign", vision=4, campaign_witness_vision=1)
        witness = cfg.witness_phase()
        assert witness.type == "Witness"
        assert witness.vision == 1
        assert witness.instructions == DEFAULT_WITNESS_INSTRUCTIONS

    def test_zero_override_is_respected(self):
        cfg = AgentConfig(type="Campaign", vision=4, campaign_scout_vision=0)
        assert cfg.scout_phase().vision == 0
