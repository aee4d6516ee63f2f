"""
Ranking module.
Scores candidate titles against the query text and settles near-ties by popularity.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

from rapidfuzz.distance import Jaro

from .config import IndexConfig
from .models import Title, TitleKind


@dataclass(frozen=True)
class Match:
	title: Title
	score: float


class Ranker:
	"""
	Picks the best title among the candidates that survived tag counting:
	- similarity: Jaro similarity of the query against primary/original title (0..1)
	- penalties: year mismatch (only ever off by one here) and non-movie kinds
	- tie band: every match within `tie_margin` of the best score
	- popularity: the most voted title in the tie band wins
	"""

	def __init__(self, config: Optional[IndexConfig] = None):
		config = config or IndexConfig()
		self.year_mismatch_penalty = config.year_mismatch_penalty
		self.non_movie_penalty = config.non_movie_penalty
		self.tie_margin = config.tie_margin

	def similarity(self, text: str, title: Title) -> float:
		"""Best case-insensitive Jaro similarity against any of the title's names."""
		query = text.lower()
		return max(Jaro.normalized_similarity(query, name.lower()) for name in title.titles())

	def score(self, text: str, title: Title, year: Optional[int] = None) -> float:
		"""
		Similarity scaled by the penalties.
		"""
		score = self.similarity(text, title)

		if year is not None and title.year != year:
			score *= self.year_mismatch_penalty

		if title.kind is not TitleKind.MOVIE:
			score *= self.non_movie_penalty

		if math.isnan(score):
			raise ValueError(f"NaN score for title {title.id}")
		return score

	def rank(self, text: str, candidates: Iterable[Title], year: Optional[int] = None) -> List[Match]:
		"""Score candidates and sort them by score, best first."""
		matches = [Match(title=title, score=self.score(text, title, year)) for title in candidates]
		matches.sort(key=lambda m: m.score, reverse=True)
		return matches

	def tie_band(self, matches: List[Match]) -> List[Match]:
		"""
		The best match plus every match whose score is within `tie_margin` of it.
		Expects `matches` sorted by rank().
		"""
		if not matches:
			return []
		best = matches[0].score
		return [m for m in matches if abs(best - m.score) <= self.tie_margin]

	@staticmethod
	def most_popular(band: List[Match]) -> Optional[Match]:
		"""Highest vote count wins; equal votes fall back to the lowest id."""
		if not band:
			return None
		return min(band, key=lambda m: (-m.title.votes, m.title.id))

	def best(self, text: str, candidates: Iterable[Title], year: Optional[int] = None) -> Optional[Title]:
		"""Rank, cut the tie band and return its most popular title (None without candidates)."""
		match = self.most_popular(self.tie_band(self.rank(text, candidates, year)))
		return match.title if match else None
