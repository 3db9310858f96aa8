"""
Unit tests for blocking configuration loading.
"""

import pytest
import yaml
import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from recordblock.blocking.models import BlockingKeyConfig, BlockingMethod, BlockingOptions, EntityType
from recordblock.blocking.registry import STANDARD_BLOCKING_CONFIGS
from recordblock.config import (
    get_default_blocking_config,
    load_blocking_config,
    merge_configs,
    parse_blocking_configs,
    resolve_entity_configs,
    validate_blocking_config,
)


class TestBlockingConfig:
    """Test cases for configuration helpers."""

    def write_config(self, tmp_path, content):
        config_file = tmp_path / "recordblock.yaml"
        config_file.write_text(yaml.safe_dump(content))
        return str(config_file)

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test a missing file falls back to defaults."""
        config = load_blocking_config(str(tmp_path / "missing.yaml"))
        assert config == get_default_blocking_config()

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        """Test unreadable YAML falls back to defaults."""
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("blocking: [unclosed")
        assert load_blocking_config(str(config_file)) == get_default_blocking_config()

    def test_load_merges_with_defaults(self, tmp_path):
        """Test the blocking section overrides defaults."""
        path = self.write_config(tmp_path, {"blocking": {"max_block_size": 500, "id_field": "uuid"}})
        config = load_blocking_config(path)

        assert config["max_block_size"] == 500
        assert config["id_field"] == "uuid"
        assert config["large_block_warning"] == 1000
        assert validate_blocking_config(config)

    def test_validate_rejects_bad_values(self):
        """Test invalid settings fail validation."""
        base = get_default_blocking_config()
        assert not validate_blocking_config(merge_configs(base, {"max_block_size": 1}))
        assert not validate_blocking_config(merge_configs(base, {"entities": {"person": {"fields": []}}}))
        assert not validate_blocking_config(merge_configs(base, {"entities": {"person": [{"method": "exact"}]}}))

    def test_validate_accepts_unknown_method(self):
        """Test unknown methods only warn."""
        config = merge_configs(get_default_blocking_config(),
                               {"entities": {"person": [{"fields": ["name"], "method": "phonex"}]}})
        assert validate_blocking_config(config)

    def test_merge_configs(self):
        """Test nested merge keeps untouched keys."""
        merged = merge_configs({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}

    def test_parse_blocking_configs(self):
        """Test YAML entries become blocking key configs."""
        configs = parse_blocking_configs([
            {"fields": ["lastName"], "method": "prefix", "options": {"prefixLength": 4}},
            {"fields": ["city"], "method": "NGRAM", "options": {"ngram_size": 2, "normalize": False}},
            {"fields": ["name"], "method": "phonex"},
        ])

        assert configs[0] == BlockingKeyConfig(("lastName",), BlockingMethod.PREFIX, BlockingOptions(prefix_length=4))
        assert configs[1].method is BlockingMethod.NGRAM
        assert configs[1].options == BlockingOptions(ngram_size=2, normalize=False)
        assert configs[2].method == "phonex"

    def test_resolve_entity_configs(self):
        """Test configured entities override the registry."""
        config = merge_configs(get_default_blocking_config(),
                               {"entities": {"product": [{"fields": ["gtin"], "method": "exact"}]}})

        assert resolve_entity_configs(config, "product") == (
            BlockingKeyConfig(("gtin",), BlockingMethod.EXACT),
        )
        assert resolve_entity_configs(config, EntityType.COMPANY) == STANDARD_BLOCKING_CONFIGS[EntityType.COMPANY]


if __name__ == "__main__":
    pytest.main([__file__])
