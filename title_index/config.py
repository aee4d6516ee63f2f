"""
Configuration for the Film Title Index.
Groups every URL, file name, floor and scoring constant in one immutable object
so the loader, the index and the ranker can be parameterized in tests.
"""

import os  # environment override for the index directory
from dataclasses import dataclass, field  # immutable settings record
from pathlib import Path  # filesystem paths
from typing import FrozenSet  # type hints

from .models import TitleKind  # kinds we keep from the corpus


@dataclass(frozen=True)
class IndexConfig:
	"""
	Settings shared by ingestion, persistence and lookup.
	Defaults match the public corpus and the scoring policy used in production.
	"""

	# Remote sources, fetched only when no local copy exists
	basics_url: str = 'https://datasets.imdbws.com/title.basics.tsv.gz'
	ratings_url: str = 'https://datasets.imdbws.com/title.ratings.tsv.gz'

	# Local file names inside the index directory
	basics_file: str = 'title.basics.tsv.gz'
	ratings_file: str = 'title.ratings.tsv.gz'
	snapshot_file: str = 'index.gz'

	# Ingestion filters
	min_votes: int = 50
	kinds: FrozenSet[TitleKind] = field(default_factory=lambda: frozenset(TitleKind))

	# Lookup scoring
	year_tolerance: int = 1  # candidates further than this from the query year are dropped
	year_mismatch_penalty: float = 0.85  # applied when the year is given and differs
	non_movie_penalty: float = 0.80  # applied to shorts, videos and TV movies
	tie_margin: float = 0.01  # scores this close to the best are settled by votes

	download_chunk_size: int = 64 * 1024

	ENV_DIRECTORY = 'TITLE_INDEX_DIR'

	@classmethod
	def default_directory(cls) -> Path:
		"""Index directory: $TITLE_INDEX_DIR if set, else .title_index in the working directory."""
		return Path(os.environ.get(cls.ENV_DIRECTORY, '.title_index'))

	def basics_path(self, directory: Path) -> Path:
		return Path(directory) / self.basics_file

	def ratings_path(self, directory: Path) -> Path:
		return Path(directory) / self.ratings_file

	def snapshot_path(self, directory: Path) -> Path:
		return Path(directory) / self.snapshot_file
