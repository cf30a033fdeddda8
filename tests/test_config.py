"""Tests for YAML config loading."""

import os

import pytest

from dungeonchess.config import DEFAULT_CONFIG, load_config

REPO_CONFIG = os.path.join(os.path.dirname(os.path.dirname(__file__)), "configs", "game.yaml")


class TestConfig:
    def test_defaults(self):
        config = load_config()
        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG
        config["search"]["depth"] = 1
        assert DEFAULT_CONFIG["search"]["depth"] == 5

    def test_repo_config_matches_defaults(self):
        assert load_config(REPO_CONFIG) == DEFAULT_CONFIG

    def test_yaml_overrides(self, tmp_path):
        path = tmp_path / "game.yaml"
        path.write_text("search:\n  depth: 3\ndungeon:\n  width: 12\n")
        config = load_config(str(path))
        assert config["search"]["depth"] == 3
        assert config["search"]["chase_player_king"] is False
        assert config["dungeon"]["width"] == 12
        assert config["dungeon"]["height"] == 15

    def test_overrides_beat_file(self, tmp_path):
        path = tmp_path / "game.yaml"
        path.write_text("campaign:\n  seed: 1\n")
        config = load_config(str(path), {"campaign": {"seed": 9}})
        assert config["campaign"]["seed"] == 9

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "game.yaml"
        path.write_text("search:\n  depth: 2\n  beam: 4\nrender:\n  color: true\n")
        config = load_config(str(path))
        assert "beam" not in config["search"]
        assert "render" not in config

    def test_empty_file(self, tmp_path):
        path = tmp_path / "game.yaml"
        path.write_text("")
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "game.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            load_config(str(path))
