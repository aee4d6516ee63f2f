"""
Data models for the Film Title Index.
Defines the title record and its kind, shared by the loader, index and lookup.
"""

# Enum gives us a closed set of title kinds that pickles by name
from enum import Enum  # closed enumeration
# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Import typing helpers for precise and self-documenting types
from typing import Optional  # optional values


class TitleKind(Enum):
	"""
	Kinds of titles we keep from the corpus. Series, episodes and the like are dropped.
	The value is the spelling used in the corpus 'titleType' column.
	"""
	MOVIE = 'movie'  # theatrical release
	TV_MOVIE = 'tvMovie'  # made-for-TV movie
	VIDEO = 'video'  # direct-to-video release
	SHORT = 'short'  # short film

	@classmethod
	def from_corpus(cls, text: str) -> Optional['TitleKind']:
		"""Map a corpus 'titleType' value to a kind, or None for kinds we do not index."""
		try:
			return cls(text)
		except ValueError:
			return None


@dataclass(frozen=True)
class Title:
	"""
	A single canonical movie/short/video entry from the corpus.
	Identity is the numeric id: equality and hashing ignore every other field.
	"""
	id: int  # numeric part of the corpus key (tt0133093 -> 133093)
	year: int = field(compare=False)  # release year, always a valid year after filtering
	runtime: int = field(compare=False)  # runtime in minutes, never zero
	primary_title: str = field(compare=False)  # display title
	original_title: Optional[str] = field(compare=False)  # only set when it differs from primary_title
	kind: TitleKind = field(compare=False)  # movie, tvMovie, video or short
	votes: int = field(compare=False)  # popularity proxy, at least the configured floor

	@property
	def imdb_id(self) -> str:
		"""Corpus key in its textual form, e.g. 'tt0133093'."""
		return f"tt{self.id:07d}"

	@property
	def url(self) -> str:
		"""Public page for the title, handy when reporting a match."""
		return f"https://imdb.com/title/{self.imdb_id}/"

	def titles(self):
		"""Primary title followed by the original title when there is one."""
		if self.original_title is None:
			return (self.primary_title,)
		return (self.primary_title, self.original_title)
