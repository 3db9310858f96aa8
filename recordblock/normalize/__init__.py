"""
Value normalization for RecordBlock.

Canonicalizes raw field values before blocking keys are generated.
"""

from recordblock.normalize.value_normalizer import normalize

__all__ = ["normalize"]
