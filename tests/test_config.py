"""Tests for configuration loading."""

from pathlib import Path

import pytest

from pagescout.config import get_default_config, get_section, load_config, merge_configs


class TestDefaultConfig:
    """Tests for the bundled defaults."""

    def test_catalog_sizes(self):
        """Test the sizes of the bundled path catalogs."""
        config = get_default_config()

        assert len(config["sitemap"]["candidate_paths"]) == 8
        assert len(config["crawl"]["seed_paths"]) == 16
        assert len(config["probe"]["patterns"]) == 30

    def test_limits(self):
        """Test the bundled discovery limits."""
        config = get_default_config()

        assert config["discovery"]["max_pages"] == 100
        assert config["discovery"]["timebox_seconds"] is None
        assert config["crawl"]["max_depth"] == 5
        assert config["crawl"]["max_urls_per_depth"] == 50
        assert config["sitemap"]["max_pagination_pages"] == 10

    def test_timeouts(self):
        """Test the bundled per-request timeouts."""
        timeouts = get_default_config()["timeouts"]

        assert timeouts["sitemap"] == 15
        assert timeouts["child_sitemap"] == 10
        assert timeouts["page"] == 8
        assert timeouts["probe"] == 5

    def test_candidates_start_with_standard_location(self):
        """Test that /sitemap.xml is probed first."""
        assert get_default_config()["sitemap"]["candidate_paths"][0] == "/sitemap.xml"


class TestLoadConfig:
    """Tests for loading user config files."""

    def test_file_merged_over_defaults(self, tmp_path: Path):
        """Test that a user file only overrides the keys it sets."""
        config_file = tmp_path / "pagescout.yaml"
        config_file.write_text("crawl:\n  max_depth: 2\nprobe:\n  patterns: [/pricing/]\n")

        config = load_config(config_file)

        assert config["crawl"]["max_depth"] == 2
        assert config["crawl"]["max_urls_per_depth"] == 50
        assert config["probe"]["patterns"] == ["/pricing/"]
        assert len(config["sitemap"]["candidate_paths"]) == 8

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        """Test that an empty file leaves the defaults untouched."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        assert load_config(config_file) == get_default_config()

    def test_missing_explicit_path(self, tmp_path: Path):
        """Test that an explicit missing path raises."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_no_file_found(self, tmp_path: Path, monkeypatch):
        """Test that defaults are returned when no config file exists."""
        monkeypatch.setattr("pagescout.config.DEFAULT_CONFIG_PATHS", [tmp_path / "none.yaml"])
        assert load_config() == get_default_config()


class TestConfigHelpers:
    """Tests for merge and section lookup."""

    def test_merge_is_recursive(self):
        """Test that nested sections merge without mutating the base."""
        base = {"a": {"x": 1, "y": 2}, "b": 1}
        merged = merge_configs(base, {"a": {"y": 3}, "c": 4})

        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
        assert base["a"]["y"] == 2

    def test_section_falls_back_to_defaults(self):
        """Test section lookup with and without a config."""
        assert get_section(None, "crawl")["max_depth"] == 5
        assert get_section({"crawl": {"max_depth": 1}}, "crawl") == {"max_depth": 1}
        assert get_section({}, "unknown") == {}

    def test_null_section_falls_back_to_defaults(self):
        """Test that a null section reads as the default section."""
        assert get_section({"discovery": None}, "discovery")["max_pages"] == 100
        assert "PageScout" in get_section({"http": None}, "http")["user_agent"]
