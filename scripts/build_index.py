"""
Build (or load) and persist the title index.

This script:
1) Downloads title.basics and title.ratings if they are not cached yet
2) Loads the saved snapshot, or rebuilds it from the sources when it is missing or unreadable
3) Reports what the index contains
4) Optionally runs one lookup

Usage:
    python -m scripts.build_index
    python -m scripts.build_index --rebuild
    python -m scripts.build_index --query "The.Matrix.1080p" --year 1999

Run --rebuild after changing the Title layout: old snapshots are only
detected as stale when they fail to load.
"""

import argparse  # command-line options
import sys  # exit status
import time  # measure step timings
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from title_index.config import IndexConfig  # settings
from title_index.errors import TitleIndexError  # fatal failures
from title_index.index_builder import index_stats  # diagnostics
from title_index.search_engine import TitleIndex  # index facade


def parse_args(argv=None):
	parser = argparse.ArgumentParser(description="Build the title index and optionally run a lookup.")
	parser.add_argument('--dir', type=Path, default=None, help="index directory (default: $TITLE_INDEX_DIR or .title_index)")
	parser.add_argument('--rebuild', action='store_true', help="discard the saved snapshot and rebuild it")
	parser.add_argument('--query', type=str, default=None, help="title text to look up after loading")
	parser.add_argument('--year', type=int, default=None, help="release year for --query")
	return parser.parse_args(argv)


def main(argv=None) -> int:
	args = parse_args(argv)
	config = IndexConfig()  # production defaults
	directory = args.dir or config.default_directory()  # where sources and snapshot live

	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Build Title Index")
	logger.info("=" * 60)

	if args.rebuild:
		snapshot_path = config.snapshot_path(directory)
		if snapshot_path.exists():
			logger.info(f"Removing snapshot {snapshot_path}")
			try:
				snapshot_path.unlink()
			except OSError as e:
				logger.error(f"Could not remove snapshot {snapshot_path}: {e}")
				return 1

	t0 = time.time()  # start timer
	try:
		engine = TitleIndex.load_or_create(directory, config)
	except TitleIndexError as e:
		logger.error(f"Could not build the index: {e}")
		return 1

	stats = index_stats(engine.index)
	logger.info(f"[OK] Index contains {len(engine)} titles in {time.time() - t0:.2f}s")
	logger.info(f"[OK] {stats['tags']} tags, {stats['postings']} postings, largest bucket '{stats['largest_tag']}' ({stats['largest_size']})")

	if args.query:
		title = engine.lookup(args.query, args.year)
		if title is None:
			logger.info(f"No match for '{args.query}'")
		else:
			logger.info(f"{title.primary_title} ({title.year}) [{title.kind.value}, {title.votes} votes] {title.url}")

	logger.info("=" * 60)
	return 0


if __name__ == '__main__':
	sys.exit(main())
