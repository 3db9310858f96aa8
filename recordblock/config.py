"""
Configuration utilities for RecordBlock.

Loads, validates and merges the YAML blocking configuration and turns its
entity sections into blocking key configs.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Union

import yaml

from recordblock.blocking.models import BlockingKeyConfig, BlockingMethod, BlockingOptions, EntityType
from recordblock.blocking.registry import get_blocking_configs

logger = logging.getLogger(__name__)

_OPTION_KEYS = {
    "prefix_length": "prefix_length",
    "prefixLength": "prefix_length",
    "suffix_length": "suffix_length",
    "suffixLength": "suffix_length",
    "ngram_size": "ngram_size",
    "ngramSize": "ngram_size",
    "normalize": "normalize",
    "case_insensitive": "case_insensitive",
    "caseInsensitive": "case_insensitive",
}


def load_blocking_config(config_path: str = "config/recordblock.yaml") -> Dict[str, Any]:
    """
    Load blocking configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary, defaults merged with the file's
        ``blocking`` section
    """
    try:
        config_file = Path(config_path)
        if not config_file.exists():
            logger.warning(f"Configuration file {config_path} not found, using defaults")
            return get_default_blocking_config()

        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}

        blocking_config = merge_configs(get_default_blocking_config(), config.get("blocking", {}) or {})

        logger.info(f"Loaded blocking configuration from {config_path}")
        return blocking_config

    except (OSError, yaml.YAMLError, AttributeError) as e:
        logger.error(f"Failed to load configuration from {config_path}: {e}")
        return get_default_blocking_config()


def get_default_blocking_config() -> Dict[str, Any]:
    """
    Get default blocking configuration.

    Returns:
        Default configuration dictionary
    """
    return {
        "id_field": "id",
        "max_block_size": None,
        "large_block_warning": 1000,
        "entities": {},
    }


def validate_blocking_config(config: Dict[str, Any]) -> bool:
    """
    Validate blocking configuration.

    Args:
        config: Configuration dictionary

    Returns:
        True if configuration is valid, False otherwise
    """
    if not isinstance(config.get("id_field", "id"), str):
        logger.error("id_field must be a string")
        return False

    for key in ("max_block_size", "large_block_warning"):
        value = config.get(key)
        if value is not None and (not isinstance(value, int) or isinstance(value, bool) or value < 2):
            logger.error(f"{key} must be an integer of at least 2 or null")
            return False

    entities = config.get("entities", {})
    if not isinstance(entities, dict):
        logger.error("entities must be a mapping of entity type to config list")
        return False

    for entity_type, entries in entities.items():
        if not isinstance(entries, list):
            logger.error(f"entities.{entity_type} must be a list")
            return False
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict) or not entry.get("fields") or not entry.get("method"):
                logger.error(f"entities.{entity_type}[{index}] needs fields and method")
                return False
            if BlockingMethod.coerce(entry["method"]) is None:
                logger.warning(f"entities.{entity_type}[{index}] uses unknown method "
                               f"{entry['method']!r}, values will be used as keys")

    logger.info("Configuration validation passed")
    return True


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configuration dictionaries.

    Args:
        base_config: Base configuration
        override_config: Override configuration

    Returns:
        Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def parse_blocking_options(options: Dict[str, Any]) -> BlockingOptions:
    """Build BlockingOptions from a YAML options mapping, ignoring unknown keys."""
    kwargs = {}
    for key, value in (options or {}).items():
        option_name = _OPTION_KEYS.get(key)
        if option_name is None:
            logger.warning(f"Ignoring unknown blocking option {key!r}")
            continue
        kwargs[option_name] = value
    return BlockingOptions(**kwargs)


def parse_blocking_configs(entries: Sequence[Dict[str, Any]]) -> Tuple[BlockingKeyConfig, ...]:
    """
    Turn YAML config entries into blocking key configs.

    Unknown method names are kept as strings and handled by the
    dispatcher's fallback.

    Args:
        entries: Mappings with ``fields``, ``method`` and optional ``options``

    Returns:
        Tuple of blocking key configs
    """
    configs = []
    for entry in entries:
        method = BlockingMethod.coerce(entry["method"]) or str(entry["method"])
        configs.append(BlockingKeyConfig(
            fields=entry["fields"],
            method=method,
            options=parse_blocking_options(entry.get("options", {})),
        ))
    return tuple(configs)


def resolve_entity_configs(config: Dict[str, Any],
                           entity_type: Union[EntityType, str]) -> Tuple[BlockingKeyConfig, ...]:
    """
    Blocking configs for an entity type.

    Entries under ``entities`` in the loaded configuration take precedence
    over the standard registry.
    """
    name = entity_type.value if isinstance(entity_type, EntityType) else str(entity_type)
    entries: List[Dict[str, Any]] = (config.get("entities") or {}).get(name)

    if entries:
        logger.info(f"Using {len(entries)} configured blocking configs for {name}")
        return parse_blocking_configs(entries)

    return get_blocking_configs(name)
