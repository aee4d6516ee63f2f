"""
Exceptions raised by the Film Title Index.
Every error keeps the original exception as its cause (raise ... from ...).
"""


class TitleIndexError(Exception):
	"""Base class for all index failures."""
	pass


class DownloadError(TitleIndexError):
	"""Raised when a source dataset cannot be fetched or written to disk."""
	pass


class CorpusParseError(TitleIndexError):
	"""Raised when a source dataset cannot be opened, decompressed or parsed."""
	pass


class SnapshotError(TitleIndexError):
	"""Raised when a persisted snapshot is missing, corrupt or has the wrong shape."""
	pass
