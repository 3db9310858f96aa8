"""
Blocking pipeline orchestrator for RecordBlock.

Loads records, builds blocks for an entity type, extracts candidate pairs
and writes them out for the downstream similarity scoring stage.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from recordblock.blocking.block_key_builder import (
    BlockKeyBuilder,
    candidate_pairs_to_dataframe,
    records_from_dataframe,
)
from recordblock.blocking.models import EntityType
from recordblock.config import load_blocking_config, resolve_entity_configs, validate_blocking_config

logger = logging.getLogger(__name__)


class BlockingPipeline:
    """
    Runs the blocking stage end to end.

    Reads records with pandas, blocks them with the configured or standard
    configs for one entity type and reports blocking statistics.
    """

    def __init__(self, config_path: str = "config/recordblock.yaml"):
        """
        Initialize pipeline with configuration.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = config_path
        self.config = load_blocking_config(config_path)
        if not validate_blocking_config(self.config):
            raise ValueError(f"Invalid blocking configuration in {config_path}")

        self.stage_times: Dict[str, float] = {}
        self._stage_starts: Dict[str, float] = {}

        logger.info("Initialized RecordBlock pipeline")

    def _start_stage_timer(self, stage_name: str):
        """Start timing for a pipeline stage."""
        self._stage_starts[stage_name] = time.time()
        logger.info(f"Starting stage: {stage_name}")

    def _end_stage_timer(self, stage_name: str):
        """End timing for a pipeline stage."""
        if stage_name in self._stage_starts:
            duration = time.time() - self._stage_starts.pop(stage_name)
            self.stage_times[stage_name] = duration
            logger.info(f"Completed stage: {stage_name} in {duration:.2f} seconds")

    def load_records(self, input_path: str) -> List[Dict[str, Any]]:
        """
        Load records from a local file.

        Args:
            input_path: CSV, JSON array, JSON lines (.jsonl) or Parquet file

        Returns:
            Record dicts in file order
        """
        self._start_stage_timer("load_records")

        if input_path.endswith(".csv"):
            df = pd.read_csv(input_path, dtype=str)
        elif input_path.endswith(".parquet"):
            df = pd.read_parquet(input_path)
        elif input_path.endswith(".json") or input_path.endswith(".jsonl"):
            df = pd.read_json(input_path, lines=input_path.endswith(".jsonl"), dtype=False)
        else:
            raise ValueError(f"Unsupported file format: {input_path}")

        records = records_from_dataframe(df)
        logger.info(f"Loaded {len(records)} records from {input_path}")

        self._end_stage_timer("load_records")
        return records

    def run(self, records: List[Dict[str, Any]], entity_type: str = EntityType.PERSON.value,
            id_field: Optional[str] = None, max_block_size: Optional[int] = None) -> Dict[str, Any]:
        """
        Block records and extract candidate pairs.

        Args:
            records: Records to block
            entity_type: Entity type selecting the blocking configs
            id_field: Record id field, defaults to the configured one
            max_block_size: Block size cap, defaults to the configured one

        Returns:
            Report with candidate pairs, statistics and stage timings
        """
        id_field = id_field or self.config.get("id_field", "id")
        if max_block_size is None:
            max_block_size = self.config.get("max_block_size")

        configs = resolve_entity_configs(self.config, entity_type)
        builder = BlockKeyBuilder(
            configs,
            max_block_size=max_block_size,
            large_block_warning=self.config.get("large_block_warning"),
        )

        self._start_stage_timer("blocking")
        blocks = builder.create_blocks(records)
        self._end_stage_timer("blocking")

        self._start_stage_timer("candidate_pairs")
        builder.warn_missing_ids(records, id_field)
        pairs = list(builder.iter_block_pairs(blocks, id_field))
        self._end_stage_timer("candidate_pairs")

        statistics = builder.get_blocking_statistics(records, blocks, pairs)

        return {
            "entity_type": entity_type,
            "id_field": id_field,
            "candidate_pairs": pairs,
            "statistics": statistics,
            "stage_times": dict(self.stage_times),
        }

    def save_pairs(self, report: Dict[str, Any], output_path: str):
        """Write candidate pairs from a run report to CSV."""
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        pairs_df = candidate_pairs_to_dataframe(report["candidate_pairs"], report["id_field"])
        pairs_df.to_csv(output_file, index=False)

        logger.info(f"Saved {len(pairs_df)} candidate pairs to {output_path}")


def main(argv: Optional[List[str]] = None):
    """Main entry point for the RecordBlock pipeline."""
    parser = argparse.ArgumentParser(description="RecordBlock candidate pair generation")
    parser.add_argument("--input", required=True, help="Input records (CSV, JSON, JSON lines or Parquet)")
    parser.add_argument("--entity-type", default=EntityType.PERSON.value,
                        help="Entity type selecting the blocking configs")
    parser.add_argument("--config", default="config/recordblock.yaml", help="Configuration file path")
    parser.add_argument("--id-field", help="Record id field")
    parser.add_argument("--output", help="Output CSV path for candidate pairs")
    parser.add_argument("--max-block-size", type=int, help="Skip blocks larger than this")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        pipeline = BlockingPipeline(args.config)
        records = pipeline.load_records(args.input)
        report = pipeline.run(
            records,
            entity_type=args.entity_type,
            id_field=args.id_field,
            max_block_size=args.max_block_size,
        )
        if args.output:
            pipeline.save_pairs(report, args.output)

        statistics = report["statistics"]
        print("\n" + "=" * 50)
        print("BLOCKING SUMMARY")
        print("=" * 50)
        print(f"Records: {statistics['total_records']:,}")
        print(f"Possible Pairs: {statistics['total_possible_pairs']:,}")
        print(f"Candidate Pairs: {statistics['generated_candidates']:,} "
              f"({statistics['reduction_percentage']:.1f}% reduction)")
        print("=" * 50)

    except Exception as e:
        logger.error(f"Blocking pipeline failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
