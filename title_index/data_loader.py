"""
Corpus loading module.
Streams the gzip-compressed, tab-separated title and rating datasets
and keeps the titles that pass every ingestion filter.
"""

# Standard libs for gzip streams, TSV parsing, typing, and paths
import csv  # tab-separated rows
import gzip  # compressed source files
import re  # strict numeric fields
import zlib  # decompression errors
from typing import Dict, Iterator, List, Optional, Tuple  # type hints
from pathlib import Path  # filesystem-safe paths

# Import our data classes and settings used across the project
from .config import IndexConfig  # floors and file names
from .errors import CorpusParseError  # fatal ingestion failure
from .models import Title, TitleKind  # structured title record

# Console logging
from loguru import logger  # console logger

# Marker used by the corpus for an absent value
NULL_FIELD = '\\N'

# Column positions in title.basics
COL_ID = 0
COL_KIND = 1
COL_PRIMARY_TITLE = 2
COL_ORIGINAL_TITLE = 3
COL_IS_ADULT = 4
COL_START_YEAR = 5
COL_RUNTIME = 7

# Column positions in title.ratings
COL_RATING_ID = 0
COL_NUM_VOTES = 2

# Both year and runtime are stored as unsigned 16-bit values
MAX_SMALL_INT = 0xFFFF

# The adult flag is a single unsigned byte
MAX_ADULT_FLAG = 0xFF

# Plain ASCII digits only: no sign, padding, underscores or other scripts
RE_UNSIGNED = re.compile(r"[0-9]+")


def _parse_unsigned(raw: str) -> int:
	"""Parse a field made only of ASCII digits; anything else raises ValueError."""
	if not RE_UNSIGNED.fullmatch(raw):
		raise ValueError(f"not an unsigned integer: {raw!r}")
	return int(raw)


class CorpusLoader:
	"""
	Handles loading and filtering of the raw corpus.
	"""

	def __init__(self, config: Optional[IndexConfig] = None):
		"""Keep the settings that drive the filters (vote floor, kinds)."""
		self.config = config or IndexConfig()  # defaults match the public corpus

	def load(self, basics_path: Path, ratings_path: Path) -> Dict[int, Title]:
		"""
		Run the ratings pass, then the basics pass.
		Returns a mapping id -> Title with exactly the ids that passed every filter.
		"""
		votes = self.load_votes(ratings_path)  # id -> votes above the floor
		return self.load_titles(basics_path, votes)  # id -> Title

	def load_votes(self, path: Path) -> Dict[int, int]:
		"""
		Read title.ratings and keep ids with at least `min_votes` votes.
		Any malformed id or vote count aborts the whole pass.
		"""
		path = Path(path)  # normalize path
		logger.info(f"[Corpus] Loading ratings from {path}...")  # log action

		votes_table: Dict[int, int] = {}  # accumulator
		rows = 0  # rows seen, for diagnostics
		for line_num, row in self._read_rows(path):
			rows += 1
			title_id = self._parse_id(row, COL_RATING_ID, path, line_num)  # 'tt0000001' -> 1
			num_votes = self._parse_required_int(row, COL_NUM_VOTES, path, line_num)  # vote count

			# Below the floor there is too little signal to trust the title
			if num_votes >= self.config.min_votes:
				votes_table[title_id] = num_votes

		logger.info(f"[Corpus] Read {rows} ratings, kept {len(votes_table)} with >= {self.config.min_votes} votes")  # summary
		return votes_table

	def load_titles(self, path: Path, votes_table: Dict[int, int]) -> Dict[int, Title]:
		"""
		Read title.basics and build Title records for the rows that pass the filters:
		not adult, a kept kind, a non-zero year and runtime, and an entry in votes_table.
		"""
		path = Path(path)  # normalize path
		logger.info(f"[Corpus] Loading titles from {path}...")  # log action

		titles: Dict[int, Title] = {}  # accumulator
		rows = 0  # rows seen, for diagnostics
		for line_num, row in self._read_rows(path):
			rows += 1
			title = self._parse_title(row, votes_table, path, line_num)  # None when filtered out
			if title is not None:
				titles[title.id] = title

		logger.info(f"[Corpus] Read {rows} titles, kept {len(titles)}")  # summary
		return titles

	def _parse_title(self, row: List[str], votes_table: Dict[int, int], path: Path, line_num: int) -> Optional[Title]:
		"""Convert one basics row into a Title, or None if any filter rejects it."""
		# Adult flag must be present and explicitly zero
		adult = self._parse_optional_int(self._field(row, COL_IS_ADULT, path, line_num), MAX_ADULT_FLAG)
		if adult is None or adult == 1:
			return None

		kind = TitleKind.from_corpus(self._field(row, COL_KIND, path, line_num))
		if kind is None or kind not in self.config.kinds:
			return None

		year = self._parse_optional_int(self._field(row, COL_START_YEAR, path, line_num), MAX_SMALL_INT)
		runtime = self._parse_optional_int(self._field(row, COL_RUNTIME, path, line_num), MAX_SMALL_INT)
		if not year or not runtime:  # absent, unparsable or zero
			return None

		title_id = self._parse_id(row, COL_ID, path, line_num)
		num_votes = votes_table.get(title_id)
		if num_votes is None:  # no signal
			return None

		primary_title = self._field(row, COL_PRIMARY_TITLE, path, line_num)
		original_title = self._field(row, COL_ORIGINAL_TITLE, path, line_num)

		return Title(
			id=title_id,
			year=year,
			runtime=runtime,
			primary_title=primary_title,
			original_title=original_title if original_title != primary_title else None,  # only keep a distinct original
			kind=kind,
			votes=num_votes,
		)

	def _read_rows(self, path: Path) -> Iterator[Tuple[int, List[str]]]:
		"""
		Yield (line number, columns) for every data row, skipping the header.
		Open and decompression failures become CorpusParseError.
		"""
		try:
			with gzip.open(path, 'rt', encoding='utf-8', newline='') as f:
				reader = csv.reader(f, delimiter='\t', quoting=csv.QUOTE_NONE)  # the corpus never quotes
				next(reader, None)  # header row
				for line_num, row in enumerate(reader, 2):
					if row:  # blank lines carry nothing
						yield line_num, row
		except (OSError, EOFError, zlib.error, UnicodeDecodeError, csv.Error) as e:
			raise CorpusParseError(f"Failed to read {path}: {e}") from e

	@staticmethod
	def _field(row: List[str], column: int, path: Path, line_num: int) -> str:
		"""Return a column, failing the whole load on short rows."""
		try:
			return row[column]
		except IndexError as e:
			raise CorpusParseError(f"{path}:{line_num}: expected at least {column + 1} columns, got {len(row)}") from e

	def _parse_id(self, row: List[str], column: int, path: Path, line_num: int) -> int:
		"""Strip the two-letter 'tt' prefix and parse the numeric key."""
		raw = self._field(row, column, path, line_num)
		try:
			value = _parse_unsigned(raw[2:])
		except ValueError as e:
			raise CorpusParseError(f"{path}:{line_num}: invalid title id {raw!r}") from e
		return value

	def _parse_required_int(self, row: List[str], column: int, path: Path, line_num: int) -> int:
		raw = self._field(row, column, path, line_num)
		try:
			value = _parse_unsigned(raw)
		except ValueError as e:
			raise CorpusParseError(f"{path}:{line_num}: invalid integer {raw!r} in column {column}") from e
		return value

	@staticmethod
	def _parse_optional_int(raw: str, upper: int) -> Optional[int]:
		"""
		Parse an optional unsigned field. Returns None for the null marker,
		for text that is not a number, and for values outside [0, upper].
		"""
		if raw == NULL_FIELD:
			return None
		try:
			value = _parse_unsigned(raw)
		except ValueError:
			return None
		if value > upper:
			return None
		return value
