"""
Block key builder for RecordBlock.

Applies blocking configs across a record set, groups records into blocks
keyed by ``method:field:key`` and extracts candidate pairs, each unordered
pair of ids emitted once no matter how many blocks it shares.
"""

import hashlib
import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

import pandas as pd

from recordblock.blocking.key_generators import generate_keys_for_value
from recordblock.blocking.models import BlockingKey, BlockingKeyConfig, BlockingMethod
from recordblock.blocking.record import field_value_as_text, get_field_value

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
Blocks = Dict[str, List[Record]]
CandidatePair = Tuple[Record, Record]

DEFAULT_ID_FIELD = "id"
DEFAULT_LARGE_BLOCK_WARNING = 1000


def canonical_pair_key(record_1: Record, record_2: Record, id_field: str = DEFAULT_ID_FIELD) -> str:
    """
    Order-independent ``id1:id2`` key for a pair of records.

    Ids are compared as strings. A record without the id field stringifies
    to ``"None"`` and collides with every other such record.
    """
    id_1 = str(record_1.get(id_field))
    id_2 = str(record_2.get(id_field))
    return f"{id_1}:{id_2}" if id_1 < id_2 else f"{id_2}:{id_1}"


class BlockKeyBuilder:
    """
    Builds blocks and candidate pairs for multi-key blocking.

    Each record can land in any number of blocks, one per method, field
    and generated key. Candidate pair cost is the sum of squared block
    sizes, so configs must keep blocks small; ``max_block_size`` optionally
    skips blocks above a cap at the price of recall.
    """

    def __init__(self, configs: Sequence[BlockingKeyConfig],
                 max_block_size: Optional[int] = None,
                 large_block_warning: Optional[int] = DEFAULT_LARGE_BLOCK_WARNING):
        """
        Initialize block key builder.

        Args:
            configs: Blocking key configurations to apply
            max_block_size: Skip blocks with more members than this during
                pair extraction; None pairs every block
            large_block_warning: Log a warning for blocks at least this large
        """
        self.configs = tuple(configs)
        self.max_block_size = max_block_size
        self.large_block_warning = large_block_warning

        for config in self.configs:
            if BlockingMethod.coerce(config.method) is None:
                logger.warning(f"Unknown blocking method {config.method!r} for fields "
                               f"{list(config.fields)}, falling back to normalized values")

        logger.debug(f"Initialized BlockKeyBuilder with {len(self.configs)} blocking configs")

    def generate_blocking_keys(self, record: Record) -> List[BlockingKey]:
        """
        Generate all blocking keys for one record.

        Args:
            record: Record mapping

        Returns:
            Keys in config order, then field order, then generator order
        """
        keys = []

        for config in self.configs:
            for field_path in config.fields:
                value = field_value_as_text(get_field_value(record, field_path))
                if value is None:
                    logger.debug(f"Skipping missing field {field_path} for {config.method_name}")
                    continue

                for key in generate_keys_for_value(value, config.method, config.options):
                    keys.append(BlockingKey(key=key, method=config.method_name, field=field_path))

        return keys

    def create_blocks(self, records: Iterable[Record]) -> Blocks:
        """
        Group records into blocks by composite key.

        Args:
            records: Records to block

        Returns:
            Mapping of ``method:field:key`` to records, in input order
        """
        blocks: Blocks = {}
        record_count = 0

        for record in records:
            record_count += 1
            for blocking_key in self.generate_blocking_keys(record):
                blocks.setdefault(blocking_key.block_key, []).append(record)

        logger.info(f"Built {len(blocks):,} blocks from {record_count:,} records")
        return blocks

    def _check_block_size(self, block_key: str, size: int) -> bool:
        """Return False if the block should be skipped."""
        if self.large_block_warning and size >= self.large_block_warning:
            logger.warning(f"Block {block_key} is large ({size} records), "
                           f"blocking config may be under-selective")

        if self.max_block_size is not None and size > self.max_block_size:
            logger.warning(f"Block {block_key} too large ({size} records), skipping")
            return False

        return True

    def iter_block_pairs(self, blocks: Mapping[str, Sequence[Record]],
                         id_field: str = DEFAULT_ID_FIELD,
                         seen: Optional[Set[str]] = None) -> Iterator[CandidatePair]:
        """
        Yield deduplicated pairs from already built blocks.

        Args:
            blocks: Block mapping, walked in iteration order
            id_field: Record field identifying a record
            seen: Canonical pair keys already emitted; updated in place

        Yields:
            Record pairs in first-seen block order
        """
        if seen is None:
            seen = set()

        for block_key, block in blocks.items():
            size = len(block)
            if size < 2 or not self._check_block_size(block_key, size):
                continue

            for i in range(size):
                for j in range(i + 1, size):
                    if block[i] is block[j]:
                        continue
                    pair_key = canonical_pair_key(block[i], block[j], id_field)
                    if pair_key in seen:
                        continue
                    seen.add(pair_key)
                    yield block[i], block[j]

    def iter_candidate_pairs(self, records: Iterable[Record],
                             id_field: str = DEFAULT_ID_FIELD) -> Iterator[CandidatePair]:
        """Lazily yield candidate pairs in the order of ``get_candidate_pairs``."""
        blocks = self.create_blocks(records)
        return self.iter_block_pairs(blocks, id_field)

    def get_candidate_pairs(self, records: Iterable[Record],
                            id_field: str = DEFAULT_ID_FIELD) -> List[CandidatePair]:
        """
        Generate candidate pairs from records sharing at least one block.

        Args:
            records: Records to block
            id_field: Record field identifying a record

        Returns:
            Unique unordered record pairs
        """
        records = list(records)
        self.warn_missing_ids(records, id_field)

        pairs = list(self.iter_candidate_pairs(records, id_field))

        if not pairs:
            logger.warning("No candidate pairs generated")
        else:
            logger.info(f"Generated {len(pairs):,} unique candidate pairs")
        return pairs

    @staticmethod
    def warn_missing_ids(records: Sequence[Record], id_field: str):
        """Log records whose id field is absent; non-mapping records are ignored."""
        missing = sum(1 for record in records
                      if isinstance(record, Mapping) and record.get(id_field) is None)
        if missing:
            logger.warning(f"{missing} records lack id field {id_field!r}; "
                           f"their pairs will collide")

    def get_blocking_statistics(self, records: Sequence[Record], blocks: Mapping[str, Sequence[Record]],
                                pairs: Sequence[CandidatePair]) -> Dict[str, Any]:
        """
        Calculate blocking efficiency statistics.

        Args:
            records: Blocked records
            blocks: Blocks built from the records
            pairs: Candidate pairs extracted from the blocks

        Returns:
            Dictionary with blocking statistics
        """
        total_records = len(records)
        total_possible_pairs = total_records * (total_records - 1) // 2
        generated_candidates = len(pairs)

        reduction_ratio = 1 - (generated_candidates / total_possible_pairs) if total_possible_pairs > 0 else 0

        # Group block sizes and members by the method:field prefix of the key
        block_stats = {}
        sizes: Dict[str, List[int]] = {}
        members: Dict[str, Set[int]] = {}
        for block_key, block in blocks.items():
            method, field_path, _ = block_key.split(":", 2)
            strategy = f"{method}:{field_path}"
            sizes.setdefault(strategy, []).append(len(block))
            members.setdefault(strategy, set()).update(id(record) for record in block)

        for strategy, strategy_sizes in sizes.items():
            block_stats[strategy] = {
                "num_blocks": len(strategy_sizes),
                "avg_block_size": sum(strategy_sizes) / len(strategy_sizes),
                "max_block_size": max(strategy_sizes),
                "coverage": len(members[strategy]) / total_records if total_records else 0.0,
            }

        statistics = {
            "total_records": total_records,
            "total_possible_pairs": total_possible_pairs,
            "generated_candidates": generated_candidates,
            "reduction_ratio": reduction_ratio,
            "reduction_percentage": reduction_ratio * 100,
            "blocking_strategies": block_stats,
        }

        logger.info(f"Blocking statistics: {generated_candidates:,} candidates from "
                    f"{total_possible_pairs:,} possible pairs "
                    f"({statistics['reduction_percentage']:.2f}% reduction)")

        return statistics


def shard_for_key(block_key: str, num_shards: int) -> int:
    """Stable shard index for a block key."""
    digest = hashlib.md5(block_key.encode("utf-8")).hexdigest()
    return int(digest[:16], 16) % num_shards


def partition_blocks(blocks: Mapping[str, Sequence[Record]], num_shards: int) -> List[Blocks]:
    """
    Split blocks into shards that can be paired independently.

    A block's members depend only on its key, so each block goes to exactly
    one shard; block order within a shard follows the input order.
    """
    if num_shards < 1:
        raise ValueError(f"num_shards must be positive, got {num_shards}")

    shards: List[Blocks] = [{} for _ in range(num_shards)]
    for block_key, block in blocks.items():
        shards[shard_for_key(block_key, num_shards)][block_key] = list(block)
    return shards


def pairs_from_blocks(blocks: Mapping[str, Sequence[Record]],
                      id_field: str = DEFAULT_ID_FIELD,
                      max_block_size: Optional[int] = None) -> List[CandidatePair]:
    """Deduplicated candidate pairs for one shard of blocks."""
    builder = BlockKeyBuilder((), max_block_size=max_block_size)
    return list(builder.iter_block_pairs(blocks, id_field))


def merge_candidate_pairs(pair_streams: Iterable[Iterable[CandidatePair]],
                          id_field: str = DEFAULT_ID_FIELD) -> List[CandidatePair]:
    """
    Merge per-shard pair lists, dropping pairs already seen in an earlier shard.

    Args:
        pair_streams: Pair sequences, one per shard
        id_field: Record field identifying a record

    Returns:
        Unique unordered record pairs
    """
    seen: Set[str] = set()
    merged = []

    for stream in pair_streams:
        for record_1, record_2 in stream:
            pair_key = canonical_pair_key(record_1, record_2, id_field)
            if pair_key not in seen:
                seen.add(pair_key)
                merged.append((record_1, record_2))

    logger.info(f"Merged {len(merged):,} unique candidate pairs")
    return merged


def records_from_dataframe(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Convert a DataFrame into record dicts, dropping NaN cells.

    Args:
        df: Record DataFrame, one row per record

    Returns:
        List of record dicts in row order
    """
    records = []
    for row in df.to_dict(orient="records"):
        records.append({key: value for key, value in row.items()
                        if not (pd.api.types.is_scalar(value) and pd.isna(value))})
    return records


def candidate_pairs_to_dataframe(pairs: Sequence[CandidatePair],
                                 id_field: str = DEFAULT_ID_FIELD) -> pd.DataFrame:
    """Candidate pairs as a DataFrame of ``record_id_1``/``record_id_2``."""
    if not pairs:
        return pd.DataFrame(columns=["record_id_1", "record_id_2"])

    return pd.DataFrame(
        [{"record_id_1": record_1.get(id_field), "record_id_2": record_2.get(id_field)}
         for record_1, record_2 in pairs]
    )


def generate_blocking_keys(record: Record, configs: Sequence[BlockingKeyConfig]) -> List[BlockingKey]:
    """Convenience function to generate blocking keys for one record."""
    return BlockKeyBuilder(configs, large_block_warning=None).generate_blocking_keys(record)


def create_blocks(records: Iterable[Record], configs: Sequence[BlockingKeyConfig]) -> Blocks:
    """Convenience function to group records into blocks."""
    return BlockKeyBuilder(configs).create_blocks(records)


def get_candidate_pairs(records: Iterable[Record], configs: Sequence[BlockingKeyConfig],
                        id_field: str = DEFAULT_ID_FIELD) -> List[CandidatePair]:
    """
    Convenience function to block records and extract candidate pairs.

    Args:
        records: Records to block
        configs: Blocking key configurations
        id_field: Record field identifying a record

    Returns:
        Unique unordered record pairs
    """
    return BlockKeyBuilder(configs).get_candidate_pairs(records, id_field)
