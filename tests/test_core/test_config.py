"""Tests for neurodeg.core.config."""

from pathlib import Path

import pytest

from neurodeg.core.config import AnalysisConfig


class TestAnalysisConfig:
    def test_defaults(self):
        cfg = AnalysisConfig()
        assert cfg.fixed_threshold is False
        assert cfg.soma_channel == 1
        assert cfg.neurite_channel == 2
        assert cfg.neurite_marker == "MAP2"
        assert cfg.soma_min_area == 20.0
        assert cfg.neurite_min_area == 0.20
        assert (cfg.fragment_min_area, cfg.fragment_max_area) == (0.0202, 0.255)
        assert (cfg.fragment_min_circularity, cfg.fragment_max_circularity) == (0.2, 1.0)
        assert cfg.reference_treatment == "Null"

    def test_fixed_threshold_requires_values(self):
        with pytest.raises(ValueError, match="soma_threshold"):
            AnalysisConfig(fixed_threshold=True, neurite_threshold=10)

    def test_fixed_threshold_range(self):
        with pytest.raises(ValueError, match="between 0 and 255"):
            AnalysisConfig(fixed_threshold=True, soma_threshold=300, neurite_threshold=10)

    def test_fixed_threshold_ok(self):
        cfg = AnalysisConfig(fixed_threshold=True, soma_threshold=40, neurite_threshold=25)
        assert cfg.soma_threshold == 40

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown threshold method"):
            AnalysisConfig(neurite_threshold_method="magic")

    def test_channels_must_differ(self):
        with pytest.raises(ValueError, match="must differ"):
            AnalysisConfig(soma_channel=2, neurite_channel=2)

    def test_channels_one_based(self):
        with pytest.raises(ValueError, match="1-based"):
            AnalysisConfig(soma_channel=0)

    def test_fragment_band_order(self):
        with pytest.raises(ValueError, match="fragment_max_area"):
            AnalysisConfig(fragment_min_area=0.5, fragment_max_area=0.1)

    def test_circularity_band(self):
        with pytest.raises(ValueError, match="circularity"):
            AnalysisConfig(fragment_min_circularity=0.8, fragment_max_circularity=0.5)

    def test_sigmas_positive(self):
        with pytest.raises(ValueError, match="neurite_sigmas"):
            AnalysisConfig(neurite_sigmas=(1.0, 0.0))


class TestConfigSerialization:
    def test_yaml_round_trip(self, tmp_path: Path):
        cfg = AnalysisConfig(
            fixed_threshold=True, soma_threshold=40, neurite_threshold=25,
            neurite_marker="TUJ1", neurite_sigmas=(1.0, 1.5),
            save_network_mask=True,
        )
        path = tmp_path / "config.yaml"
        cfg.to_yaml(path)
        assert AnalysisConfig.from_yaml(path) == cfg

    def test_partial_yaml_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("neurite_marker: NF200\n")
        cfg = AnalysisConfig.from_yaml(path)
        assert cfg.neurite_marker == "NF200"
        assert cfg.soma_channel == 1

    def test_empty_yaml(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert AnalysisConfig.from_yaml(path) == AnalysisConfig()

    def test_unknown_key_rejected(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("soma_chanel: 2\n")
        with pytest.raises(ValueError, match="soma_chanel"):
            AnalysisConfig.from_yaml(path)

    def test_non_mapping_rejected(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            AnalysisConfig.from_yaml(path)
