"""Tests for the TOML configuration layer."""

from pathlib import Path

import pytest
import toml

from depgraph_cli import config
from depgraph_cli.config_manager import (
    ConfigError,
    GraphConfig,
    load_full_config,
    load_graph_config,
    save_graph_config,
)


class TestGraphConfig:
    """Tests for the GraphConfig dataclass."""

    def test_defaults(self):
        """Test defaults come from the config module."""
        cfg = GraphConfig()
        assert cfg.damping_factor == config.DEFAULT_DAMPING_FACTOR
        assert cfg.min_cluster_size == 2
        assert cfg.bridge_top_k == 10
        assert cfg.extensions == [".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs"]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"damping_factor": 1.0},
            {"damping_factor": 0.0},
            {"max_iterations": 0},
            {"tolerance": 0},
            {"min_cluster_size": 0},
            {"bridge_top_k": -1},
            {"workers": 0},
            {"extensions": ["ts"]},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Test out-of-range values raise ConfigError."""
        with pytest.raises(ConfigError):
            GraphConfig(**kwargs)

    def test_config_error_is_value_error(self):
        """Test ConfigError can be caught as ValueError."""
        with pytest.raises(ValueError):
            GraphConfig(damping_factor=2)

    def test_from_dict_ignores_unknown_keys(self):
        """Test unknown keys are skipped."""
        cfg = GraphConfig.from_dict({"min_cluster_size": 3, "colour": "blue"})
        assert cfg.min_cluster_size == 3
        assert not hasattr(cfg, "colour")


class TestLoadSave:
    """Tests for reading and writing the TOML file."""

    def test_missing_file_gives_defaults(self, temp_dir: Path):
        """Test a missing file falls back to defaults."""
        assert load_graph_config(temp_dir / "nope.toml") == GraphConfig()

    def test_reads_graph_section(self, temp_dir: Path):
        """Test values are read from [graph]."""
        path = temp_dir / "cfg.toml"
        path.write_text("[graph]\ndamping_factor = 0.9\nextensions = ['.js']\n", encoding="utf-8")
        cfg = load_graph_config(path)
        assert cfg.damping_factor == 0.9
        assert cfg.extensions == [".js"]

    def test_invalid_value_in_file(self, temp_dir: Path):
        """Test bad values in the file raise ConfigError."""
        path = temp_dir / "cfg.toml"
        path.write_text("[graph]\nworkers = 0\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_graph_config(path)

    def test_malformed_toml(self, temp_dir: Path):
        """Test unparsable files are treated as empty."""
        path = temp_dir / "cfg.toml"
        path.write_text("[graph\n", encoding="utf-8")
        assert load_full_config(path) == {}
        assert load_graph_config(path) == GraphConfig()

    def test_save_preserves_other_sections(self, temp_dir: Path):
        """Test saving [graph] keeps unrelated sections."""
        path = temp_dir / "cfg.toml"
        path.write_text("[other]\nkeep = true\n", encoding="utf-8")
        assert save_graph_config(GraphConfig(bridge_top_k=3), path) is True

        data = toml.load(path)
        assert data["other"]["keep"] is True
        assert data["graph"]["bridge_top_k"] == 3
        assert load_graph_config(path).bridge_top_k == 3

    def test_default_location(self, isolated_config: Path):
        """Test the default path is used when none is given."""
        assert save_graph_config(GraphConfig(min_cluster_size=4)) is True
        assert isolated_config.exists()
        assert load_graph_config().min_cluster_size == 4
