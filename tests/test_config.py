"""
tests/test_config.py
====================
Tests for the JSON configuration singleton.
"""

import json

from paintshop_config import DEFAULT_CONFIG, PaintshopConfig, get_config


class TestPaintshopConfig:
    """Test PaintshopConfig class."""

    def test_singleton(self, isolated_config):
        """Test there is only one instance."""
        assert PaintshopConfig() is isolated_config
        assert get_config() is isolated_config

    def test_defaults_without_file(self, isolated_config):
        """Test defaults are used when no file exists."""
        assert isolated_config.get_all() == DEFAULT_CONFIG
        assert isolated_config.max_width == 100000
        assert isolated_config.branching_strategy == "single"
        assert not isolated_config.parallel_search_enabled
        assert isolated_config.result_caching_enabled

    def test_set_persists(self, isolated_config):
        """Test set() writes the JSON file."""
        isolated_config.set("parallel_depth", 2)
        with open(PaintshopConfig._config_file, encoding="utf-8") as f:
            assert json.load(f)["parallel_depth"] == 2
        assert isolated_config.parallel_depth == 2

    def test_update(self, isolated_config):
        """Test updating several values."""
        isolated_config.update({"max_width": 50, "search_explanation_enabled": True})
        assert isolated_config.max_width == 50
        assert isolated_config.search_explanation_enabled

    def test_load_merges_new_defaults(self, isolated_config):
        """Test keys missing from an older file are filled in."""
        PaintshopConfig._config_file.write_text(
            json.dumps({"branching_strategy": "exhaustive"}), encoding="utf-8"
        )
        isolated_config.reload()
        assert isolated_config.branching_strategy == "exhaustive"
        assert isolated_config.result_cache_size == DEFAULT_CONFIG["result_cache_size"]

    def test_corrupt_file_falls_back_to_defaults(self, isolated_config):
        """Test invalid JSON is ignored."""
        PaintshopConfig._config_file.write_text("{broken", encoding="utf-8")
        isolated_config.reload()
        assert isolated_config.get_all() == DEFAULT_CONFIG

    def test_reset_to_defaults(self, isolated_config):
        """Test resetting."""
        isolated_config.set("max_explanation_steps", 10)
        isolated_config.reset_to_defaults()
        assert isolated_config.max_explanation_steps == DEFAULT_CONFIG["max_explanation_steps"]

    def test_get_with_default(self, isolated_config):
        """Test unknown keys return the given default."""
        assert isolated_config.get("unknown", "fallback") == "fallback"

    def test_get_all_is_a_copy(self, isolated_config):
        """Test callers cannot mutate the configuration."""
        snapshot = isolated_config.get_all()
        snapshot["max_width"] = 1
        assert isolated_config.max_width == 100000
