"""
Tokenizer module.
Turns free text (a title or a filename fragment) into normalized tags.
The same function is used when building the index and when querying it.
"""

import re  # character-class splitting
from typing import Iterable, List  # type hints

# Characters that are unsafe in a path segment; filter_path replaces them with '_'
PATH_UNSAFE_CHARS = '/<>:"\\|?*'

# Extra separators commonly found in release filenames and titles
TAG_SEPARATOR_CHARS = "_-.,'()"

# Words too common to help tell titles apart
STOPWORDS = frozenset({'a', 'an', 'the', 'of', 'in', 'on', 'to', 't', 's'})

# Tag boundaries: whitespace, ASCII control chars, path-unsafe chars and separators.
# Must stay a superset of what filter_path replaces.
_CONTROL_CLASS = '\\x00-\\x1f\\x7f'
_BOUNDARY_CLASS = '[\\s' + _CONTROL_CLASS + re.escape(PATH_UNSAFE_CHARS + TAG_SEPARATOR_CHARS) + ']'
RE_TAG_BOUNDARY = re.compile(_BOUNDARY_CLASS + '+')
RE_TAG_BOUNDARY_CHAR = re.compile(_BOUNDARY_CLASS)
RE_PATH_UNSAFE = re.compile('[' + _CONTROL_CLASS + re.escape(PATH_UNSAFE_CHARS) + ']')


def is_tag_boundary(char: str) -> bool:
	"""True if the single character separates tags."""
	return RE_TAG_BOUNDARY_CHAR.fullmatch(char) is not None


def tokenize(text: str, stopwords: Iterable[str] = STOPWORDS) -> List[str]:
	"""
	Lowercase the text, split it on tag boundaries and drop empty fragments and stopwords.
	Duplicates are removed, keeping the position of the first occurrence.
	"""
	if not text:
		return []
	stopwords = stopwords if isinstance(stopwords, (set, frozenset)) else frozenset(stopwords)
	seen = set()
	tags = []
	for tag in RE_TAG_BOUNDARY.split(text.lower()):
		if not tag or tag in stopwords or tag in seen:
			continue
		seen.add(tag)
		tags.append(tag)
	return tags


def filter_path(segment: str) -> str:
	"""
	Make a single path segment safe for common filesystems.
	Unsafe and control characters become '_', trailing spaces and dots are removed.
	"""
	return RE_PATH_UNSAFE.sub('_', segment).rstrip(' .')
