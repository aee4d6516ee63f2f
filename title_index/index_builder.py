"""
Inverted index builder.
Maps every tag of every title (primary and original) to the set of title ids containing it.
"""

from typing import Callable, Dict, FrozenSet, Iterable, List, Set

from loguru import logger

from .models import Title
from .tokenizer import tokenize


def build_inverted_index(
	titles: Iterable[Title],
	tokenizer: Callable[[str], List[str]] = tokenize,
) -> Dict[str, FrozenSet[int]]:
	"""
	Build tag -> ids from the given titles.
	The result does not depend on the order titles are visited in.
	"""
	buckets: Dict[str, Set[int]] = {}
	count = 0
	for title in titles:
		count += 1
		for text in title.titles():
			for tag in tokenizer(text):
				buckets.setdefault(tag, set()).add(title.id)

	# Freeze buckets: smaller, and read-only from here on
	index = {tag: frozenset(ids) for tag, ids in buckets.items()}
	logger.info(f"[Index] Indexed {count} titles under {len(index)} tags")
	return index


def index_stats(index: Dict[str, FrozenSet[int]]) -> Dict[str, object]:
	"""Tag count, total postings and the largest bucket, for diagnostics."""
	if not index:
		return {'tags': 0, 'postings': 0, 'largest_tag': None, 'largest_size': 0}
	largest_tag = max(index, key=lambda tag: (len(index[tag]), tag))
	return {
		'tags': len(index),
		'postings': sum(len(ids) for ids in index.values()),
		'largest_tag': largest_tag,
		'largest_size': len(index[largest_tag]),
	}
