"""
Search engine module.
Holds the title table and inverted index, answers fuzzy title lookups,
and knows how to build, persist and reload itself.
"""

from collections import Counter  # occurrence counting per title
from typing import Dict, FrozenSet, List, Optional  # type annotations for clarity
from pathlib import Path  # index directory handling

# Import project modules for data structures and components
from .config import IndexConfig  # file names and scoring constants
from .data_loader import CorpusLoader  # raw corpus ingestion
from .errors import SnapshotError  # recoverable snapshot failure
from .index_builder import build_inverted_index  # tag -> ids
from .models import Title  # core data class
from .ranking import Ranker  # similarity/popularity ranking
from .snapshot import ensure_source_files, load_snapshot, save_snapshot  # persistence
from .tokenizer import tokenize  # shared normalization

# Import loguru for console logging
from loguru import logger  # simple structured logger


def most_common_titles(counts: Counter) -> List[Title]:
	"""Every title tied at the highest occurrence count (empty if nothing was counted)."""
	if not counts:
		return []
	top = max(counts.values())
	return [title for title, count in counts.items() if count == top]


class TitleIndex:
	"""
	Lookup API over a read-only title table and inverted index.
	Build it once with create() or load_or_create(); nothing mutates it afterwards,
	so a single instance can be shared between threads.
	"""
	def __init__(
		self,
		titles: Dict[int, Title],  # id -> Title
		index: Dict[str, FrozenSet[int]],  # tag -> ids
		config: Optional[IndexConfig] = None,  # scoring constants
	):
		self.titles = titles  # keep table reference
		self.index = index  # keep index reference
		self.config = config or IndexConfig()  # defaults
		self.ranker = Ranker(self.config)  # ranker instance

	def __len__(self) -> int:
		"""Number of indexed titles."""
		return len(self.titles)

	def __eq__(self, other) -> bool:
		"""Structural equality: same records field by field, same buckets."""
		if not isinstance(other, TitleIndex):
			return NotImplemented
		if self.index != other.index or self.titles.keys() != other.titles.keys():
			return False
		return all(vars(title) == vars(other.titles[title_id]) for title_id, title in self.titles.items())

	@property
	def tag_count(self) -> int:
		return len(self.index)

	def get(self, title_id: int) -> Optional[Title]:
		"""Return the Title for an id, or None if it is not indexed."""
		return self.titles.get(title_id)

	def candidates(self, text: str, year: Optional[int] = None) -> List[Title]:
		"""
		Titles sharing the most tags with the query.
		With a year, titles more than `year_tolerance` years away are never counted.
		"""
		tags = tokenize(text)  # same normalization as the index
		logger.debug(f"[Engine] Query '{text}' (year={year}) -> tags {tags}")

		counts: Counter = Counter()
		for tag in tags:
			for title_id in self.index.get(tag, ()):
				title = self.titles[title_id]
				if year is not None and abs(year - title.year) > self.config.year_tolerance:
					continue  # outside the year window
				counts[title] += 1

		result = most_common_titles(counts)
		logger.debug(f"[Engine] {len(counts)} titles hit, {len(result)} tied at the top")
		return result

	def lookup(self, text: str, year: Optional[int] = None) -> Optional[Title]:
		"""
		Best title for a noisy name fragment and optional year, or None.
		Not finding anything is a normal outcome, never an error.
		"""
		best = self.ranker.best(text, self.candidates(text, year), year)
		if best is None:
			logger.debug(f"[Engine] No match for '{text}' (year={year})")
		else:
			logger.debug(f"[Engine] '{text}' (year={year}) -> {best.primary_title} ({best.year}) {best.imdb_id}")
		return best

	@classmethod
	def create(cls, directory: Path, config: Optional[IndexConfig] = None) -> 'TitleIndex':
		"""Build the index from the source datasets already present in `directory`."""
		config = config or IndexConfig()
		directory = Path(directory)
		loader = CorpusLoader(config)  # loader instance
		titles = loader.load(config.basics_path(directory), config.ratings_path(directory))  # filtered records
		index = build_inverted_index(titles.values())  # tag -> ids
		return cls(titles, index, config)

	@classmethod
	def load(cls, path: Path, config: Optional[IndexConfig] = None) -> 'TitleIndex':
		"""Load a saved snapshot; raises SnapshotError if it is unusable."""
		titles, index = load_snapshot(path)
		return cls(titles, index, config)

	def save(self, path: Path) -> None:
		"""Persist titles and index to a snapshot file."""
		save_snapshot(self.titles, self.index, path)

	@classmethod
	def load_or_create(cls, directory: Optional[Path] = None, config: Optional[IndexConfig] = None) -> 'TitleIndex':
		"""
		Return a usable index for `directory`: the saved snapshot when it loads,
		otherwise a fresh build from the sources (downloaded if missing), saved for next time.
		"""
		config = config or IndexConfig()
		directory = Path(directory) if directory is not None else config.default_directory()
		ensure_source_files(directory, config)  # download what is missing

		snapshot_path = config.snapshot_path(directory)
		try:
			engine = cls.load(snapshot_path, config)  # fast path
			logger.info(f"[Engine] Index ready with {len(engine)} titles (from snapshot)")
			return engine
		except SnapshotError as e:
			logger.warning(f"[Engine] Rebuilding index: {e}")

		engine = cls.create(directory, config)  # slow path
		engine.save(snapshot_path)
		logger.info(f"[Engine] Index ready with {len(engine)} titles (rebuilt)")
		return engine
