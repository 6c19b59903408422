"""Unit tests for configuration loading"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
import yaml
from pydantic import ValidationError

from catalog_core.config.config_loader import format_config, load_config
from catalog_core.models.configs import CatalogConfig

PROJECT_CONFIG = Path(__file__).parent.parent / "config" / "catalog_config.yaml"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("PRODUCTS_VISIBILITY", raising=False)
    monkeypatch.delenv("CATALOG_CONFIG", raising=False)


class TestConfigLoader:
    """Test suite for configuration loading"""

    @pytest.mark.unit
    def test_load_project_config(self):
        """Test the shipped config file matches the defaults"""
        config = load_config(PROJECT_CONFIG)

        assert isinstance(config, CatalogConfig)
        assert config.products_visibility == "IN_STOCK"
        assert config.analogs.bands == (0.05, 0.10, 0.20)
        assert config.search.suggestion_threshold == 0.75
        assert config.search.max_codes is None
        assert config.resolver.fuzzy_thresholds == {"color": 90}

    @pytest.mark.unit
    def test_missing_default_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config == CatalogConfig()
        assert config.all_visible is False

    @pytest.mark.unit
    def test_missing_explicit_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    @pytest.mark.unit
    def test_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "catalog.yaml"
        path.write_text("min_sellable_price: 5\n", encoding="utf-8")
        monkeypatch.setenv("CATALOG_CONFIG", str(path))

        assert load_config().min_sellable_price == 5.0

    @pytest.mark.unit
    def test_visibility_env_override(self, monkeypatch):
        monkeypatch.setenv("PRODUCTS_VISIBILITY", "all")

        config = load_config(PROJECT_CONFIG)

        assert config.products_visibility == "ALL"
        assert config.all_visible is True

    @pytest.mark.unit
    def test_invalid_values_rejected(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "products_visibility": "SOMETIMES",
                    "analogs": {"first_price_variation": 0.3},
                }
            ),
            encoding="utf-8",
        )

        with pytest.raises(ValidationError):
            load_config(path)

    @pytest.mark.unit
    def test_config_is_frozen(self):
        config = CatalogConfig()

        with pytest.raises(ValidationError):
            config.min_sellable_price = 0

    @pytest.mark.unit
    def test_format_config_round_trips(self):
        config = CatalogConfig(products_visibility="ALL")

        data = yaml.safe_load(format_config(config))

        assert CatalogConfig(**data) == config
