"""Unit tests for configuration value objects."""

import pytest
from pydantic import ValidationError

from docstrum.domain.value_objects.config import DocstrumConfig, build_config
from docstrum.exceptions import InvalidConfigurationError


class TestDocstrumConfig:
    """Tests for DocstrumConfig."""

    def test_defaults(self):
        config = DocstrumConfig()
        assert config.k == 5
        assert config.min_component_area == 10.0
        assert config.nbins == 360
        assert config.alpha == 0.25
        assert config.degree == 5
        assert config.scan_step == 1.0
        assert config.neighbor_workers == 1

    def test_custom_values(self):
        config = build_config(k=8, nbins=180, alpha=0.0)
        assert config.k == 8
        assert config.nbins == 180
        assert config.alpha == 0.0

    def test_frozen(self):
        config = DocstrumConfig()
        with pytest.raises(ValidationError):
            config.k = 3

    @pytest.mark.parametrize("key,value", [
        ("k", 0),
        ("nbins", 0),
        ("alpha", 1.0),
        ("alpha", -0.5),
        ("degree", -1),
        ("scan_step", 0.0),
        ("min_component_area", -1.0),
        ("neighbor_workers", 0),
        ("spacing_angle_tolerance", 120.0),
    ])
    def test_out_of_range(self, key, value):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            build_config(**{key: value})
        assert exc_info.value.config_key == key
        assert exc_info.value.error_code == "CONFIG_ERROR"

    def test_unknown_key(self):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            build_config(bins=10)
        assert exc_info.value.config_key == "bins"
