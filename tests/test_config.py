"""
Tests for BuilderConfig validation and loading.
"""
import json

import pytest

from streetbuilder.config import BuilderConfig


def test_defaults():
    config = BuilderConfig()
    assert config.resource == "rock"
    assert config.variant == "staged"
    assert config.build_mode == "simple"
    assert config.collect_retries == 0
    assert not config.enable_streaming


@pytest.mark.parametrize(
    "overrides",
    [
        {"world_size": 2},
        {"rock_density": 1.5},
        {"initial_search_radius": -1},
        {"world_size": 8, "initial_search_radius": 9},
        {"goal_quantity": 0},
        {"street_length": 0},
        {"pattern_size": 0},
        {"collect_retries": -1},
        {"max_ticks": 0},
        {"energy_max": 0},
        {"backpack_size": 0},
        {"stream_interval": 0},
        {"variant": "fast"},
        {"build_mode": "random"},
        {"build_pattern": "zigzag"},
        {"build_direction": "up"},
        {"orient_direction": "down"},
        {"resource": "gold"},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValueError):
        BuilderConfig(**overrides)


def test_from_dict_ignores_unknown_keys():
    config = BuilderConfig.from_dict({"seed": 7, "street_length": 3, "colour": "red"})
    assert config.seed == 7
    assert config.street_length == 3


def test_to_dict_round_trip():
    config = BuilderConfig(world_size=12, variant="compact")
    assert BuilderConfig.from_dict(config.to_dict()) == config


def test_from_yaml(tmp_path):
    path = tmp_path / "mission.yaml"
    path.write_text("world_size: 16\nbuild_mode: patterned\nbuild_pattern: spiral\n")
    config = BuilderConfig.from_file(path)
    assert config.world_size == 16
    assert config.build_pattern == "spiral"


def test_from_empty_yaml(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("")
    assert BuilderConfig.from_file(path) == BuilderConfig()


def test_from_json(tmp_path):
    path = tmp_path / "mission.json"
    path.write_text(json.dumps({"goal_quantity": 2, "dance": False}))
    config = BuilderConfig.from_file(str(path))
    assert config.goal_quantity == 2
    assert config.dance is False


def test_from_file_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        BuilderConfig.from_file(tmp_path / "missing.yaml")

    toml = tmp_path / "mission.toml"
    toml.write_text("world_size = 8")
    with pytest.raises(ValueError, match="Unsupported config format"):
        BuilderConfig.from_file(toml)

    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]")
    with pytest.raises(ValueError, match="mapping"):
        BuilderConfig.from_file(listing)
