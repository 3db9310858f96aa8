"""
Standard blocking configurations for RecordBlock.

Per entity type, exact keys on high-precision identifiers (VAT id, SKU,
EAN, postal code) are combined with phonetic and prefix keys on noisy text
fields to balance recall against block size. The table is advisory;
callers may pass their own config lists.
"""

import logging
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from recordblock.blocking.models import (
    BlockingKeyConfig,
    BlockingMethod,
    BlockingOptions,
    EntityType,
)

logger = logging.getLogger(__name__)

STANDARD_BLOCKING_CONFIGS: Mapping[EntityType, Tuple[BlockingKeyConfig, ...]] = MappingProxyType({
    EntityType.PERSON: (
        BlockingKeyConfig(("lastName",), BlockingMethod.COLOGNE_PHONETIC),
        BlockingKeyConfig(("lastName",), BlockingMethod.PREFIX, BlockingOptions(prefix_length=4)),
        BlockingKeyConfig(("firstName", "lastName"), BlockingMethod.SOUNDEX),
        BlockingKeyConfig(("email",), BlockingMethod.PREFIX, BlockingOptions(prefix_length=5)),
    ),
    EntityType.COMPANY: (
        BlockingKeyConfig(("name",), BlockingMethod.COLOGNE_PHONETIC),
        BlockingKeyConfig(("name",), BlockingMethod.PREFIX, BlockingOptions(prefix_length=5)),
        BlockingKeyConfig(("name",), BlockingMethod.NGRAM, BlockingOptions(ngram_size=4)),
        BlockingKeyConfig(("vatId",), BlockingMethod.EXACT),
        BlockingKeyConfig(("registrationNumber",), BlockingMethod.EXACT),
    ),
    EntityType.ADDRESS: (
        BlockingKeyConfig(("postalCode",), BlockingMethod.EXACT),
        BlockingKeyConfig(("street",), BlockingMethod.COLOGNE_PHONETIC),
        BlockingKeyConfig(("city",), BlockingMethod.COLOGNE_PHONETIC),
        BlockingKeyConfig(("street",), BlockingMethod.PREFIX, BlockingOptions(prefix_length=4)),
    ),
    EntityType.PRODUCT: (
        BlockingKeyConfig(("sku",), BlockingMethod.EXACT),
        BlockingKeyConfig(("ean",), BlockingMethod.EXACT),
        BlockingKeyConfig(("name",), BlockingMethod.PREFIX, BlockingOptions(prefix_length=6)),
        BlockingKeyConfig(("name",), BlockingMethod.NGRAM, BlockingOptions(ngram_size=3)),
    ),
})


def get_blocking_configs(entity_type: Union[EntityType, str]) -> Tuple[BlockingKeyConfig, ...]:
    """
    Look up the standard blocking configs for an entity type.

    Unknown entity types fall back to the person configs.
    """
    try:
        resolved = EntityType(entity_type)
    except ValueError:
        logger.warning(f"No standard blocking configs for entity type {entity_type!r}, using person")
        resolved = EntityType.PERSON

    return STANDARD_BLOCKING_CONFIGS[resolved]
