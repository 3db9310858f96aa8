"""
Blocking strategies for RecordBlock.

Implements multi-key blocking to reduce the number of candidate pairs for
similarity scoring from all pairs to pairs that share a blocking key.
"""

from recordblock.blocking.block_key_builder import (
    BlockKeyBuilder,
    create_blocks,
    generate_blocking_keys,
    get_candidate_pairs,
)
from recordblock.blocking.models import (
    BlockingKey,
    BlockingKeyConfig,
    BlockingMethod,
    BlockingOptions,
    EntityType,
)
from recordblock.blocking.phonetic import generate_cologne_phonetic
from recordblock.blocking.registry import STANDARD_BLOCKING_CONFIGS, get_blocking_configs

__all__ = [
    "BlockKeyBuilder",
    "BlockingKey",
    "BlockingKeyConfig",
    "BlockingMethod",
    "BlockingOptions",
    "EntityType",
    "STANDARD_BLOCKING_CONFIGS",
    "create_blocks",
    "generate_blocking_keys",
    "generate_cologne_phonetic",
    "get_blocking_configs",
    "get_candidate_pairs",
]
