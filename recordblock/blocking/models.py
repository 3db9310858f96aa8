"""
Data model for RecordBlock blocking.

Blocking methods, per-config tuning options, blocking key configurations
and the keys they produce.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class BlockingMethod(str, Enum):
    """Key-generation methods supported by the dispatcher."""

    EXACT = "exact"
    PREFIX = "prefix"
    SUFFIX = "suffix"
    SOUNDEX = "soundex"
    COLOGNE_PHONETIC = "cologne_phonetic"
    NGRAM = "ngram"
    METAPHONE = "metaphone"
    NORMALIZED = "normalized"
    COMPOSITE = "composite"

    @classmethod
    def coerce(cls, value: Union["BlockingMethod", str]) -> Optional["BlockingMethod"]:
        """Return the matching member, or None for an unrecognized method."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class EntityType(str, Enum):
    """Entity types with a standard blocking configuration."""

    PERSON = "person"
    COMPANY = "company"
    ADDRESS = "address"
    PRODUCT = "product"


@dataclass(frozen=True)
class BlockingOptions:
    """Tuning parameters for a blocking method."""

    prefix_length: Optional[int] = None
    suffix_length: Optional[int] = None
    ngram_size: Optional[int] = None
    normalize: bool = True
    case_insensitive: bool = True


@dataclass(frozen=True)
class BlockingKeyConfig:
    """
    Which fields to block on and how.

    ``method`` is normally a BlockingMethod; a plain string is accepted so
    that configs read from YAML keep unknown method names, which the
    dispatcher then handles through its fallback.
    """

    fields: Tuple[str, ...]
    method: Union[BlockingMethod, str]
    options: BlockingOptions = field(default_factory=BlockingOptions)

    def __post_init__(self):
        # Freeze list input so configs stay hashable and immutable
        if isinstance(self.fields, str):
            object.__setattr__(self, "fields", (self.fields,))
        else:
            object.__setattr__(self, "fields", tuple(self.fields))
        if self.options is None:
            object.__setattr__(self, "options", BlockingOptions())

    @property
    def method_name(self) -> str:
        """Method name as used in composite block keys."""
        if isinstance(self.method, BlockingMethod):
            return self.method.value
        return str(self.method)


@dataclass(frozen=True)
class BlockingKey:
    """One key produced by applying a config to one field value."""

    key: str
    method: str
    field: str

    @property
    def block_key(self) -> str:
        """Composite ``method:field:key`` identifier of the block."""
        return f"{self.method}:{self.field}:{self.key}"
