"""
Snapshot store.
Fetches the raw source datasets when they are missing, and persists the
(titles, inverted index) pair as a gzip-compressed pickle so later runs
can skip the rebuild.
"""

# Gzip wraps the pickle stream so the snapshot stays small on disk
import gzip  # compressed snapshot
# Pickle for persisting the plain Python structures (dicts, frozensets, Titles)
import pickle  # simple serialization
# Pathlib for robust path handling when saving/loading
from pathlib import Path  # filesystem paths
# Typing hints for clarity of public API
from typing import Dict, FrozenSet, Tuple  # type hints

# HTTP client used to fetch the source datasets
import requests  # downloads

# Import our models, settings and errors
from .config import IndexConfig  # URLs and file names
from .errors import DownloadError, SnapshotError  # typed failures
from .models import Title  # title record

# Console logging
from loguru import logger  # console logger

Titles = Dict[int, Title]
InvertedIndex = Dict[str, FrozenSet[int]]


def download_file(url: str, dest: Path, chunk_size: int = 64 * 1024) -> None:
	"""
	Stream `url` into `dest`.
	Data goes to a '.part' file first and is renamed on success, so a broken
	transfer never leaves a file that a later run would trust.
	"""
	dest = Path(dest)  # coerce to Path
	partial = dest.with_name(dest.name + '.part')  # temporary target
	logger.info(f"[Snapshot] Downloading {url} -> {dest}")

	try:
		with requests.get(url, stream=True) as response:
			response.raise_for_status()  # 4xx/5xx are failures too
			with open(partial, 'wb') as f:
				for chunk in response.iter_content(chunk_size=chunk_size):
					if chunk:  # skip keep-alive chunks
						f.write(chunk)
		partial.replace(dest)  # atomic on the same filesystem
	except (requests.RequestException, OSError) as e:
		partial.unlink(missing_ok=True)  # leave nothing half-written behind
		raise DownloadError(f"Failed to download {url}: {e}") from e

	logger.info(f"[Snapshot] Saved {dest} ({dest.stat().st_size} bytes)")


def download_if_missing(url: str, dest: Path, chunk_size: int = 64 * 1024) -> bool:
	"""Download `url` unless `dest` already exists. Returns True if a download happened."""
	dest = Path(dest)
	if dest.exists():  # an existing copy is trusted as-is
		logger.debug(f"[Snapshot] Using cached {dest}")
		return False
	download_file(url, dest, chunk_size=chunk_size)
	return True


def ensure_source_files(directory: Path, config: IndexConfig) -> None:
	"""Create the index directory and fetch both source datasets if they are not there yet."""
	directory = Path(directory)
	try:
		directory.mkdir(parents=True, exist_ok=True)
	except OSError as e:
		raise DownloadError(f"Cannot create index directory {directory}: {e}") from e

	download_if_missing(config.basics_url, config.basics_path(directory), config.download_chunk_size)
	download_if_missing(config.ratings_url, config.ratings_path(directory), config.download_chunk_size)


def save_snapshot(titles: Titles, index: InvertedIndex, path: Path) -> None:
	"""
	Persist titles and index to `path` as a gzip-compressed pickle.
	Written to a temporary file and renamed, so an interrupted save keeps the old snapshot.
	"""
	path = Path(path)  # coerce to Path
	tmp_path = path.with_name(path.name + '.tmp')  # temporary target
	payload = {
		'titles': titles,  # id -> Title
		'index': index,  # tag -> frozenset of ids
	}
	try:
		with gzip.open(tmp_path, 'wb') as f:
			pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)  # compact binary encoding
		tmp_path.replace(path)
	except (OSError, pickle.PicklingError) as e:
		tmp_path.unlink(missing_ok=True)
		raise SnapshotError(f"Failed to save snapshot to {path}: {e}") from e
	logger.info(f"[Snapshot] Saved {len(titles)} titles and {len(index)} tags to {path}")


def load_snapshot(path: Path) -> Tuple[Titles, InvertedIndex]:
	"""
	Load a snapshot written by save_snapshot.
	Any failure (missing file, bad gzip data, unpickling error, unexpected shape)
	raises SnapshotError; the contents are otherwise trusted.
	"""
	path = Path(path)  # coerce to Path
	if not path.exists():
		raise SnapshotError(f"Snapshot not found: {path}")

	try:
		with gzip.open(path, 'rb') as f:
			payload = pickle.load(f)
	except Exception as e:  # pickle can raise nearly anything on foreign or truncated data
		raise SnapshotError(f"Corrupt snapshot {path}: {e}") from e

	# Only the top-level shape is checked; records are trusted after a clean decode
	if not isinstance(payload, dict) or set(payload) != {'titles', 'index'}:
		raise SnapshotError(f"Unexpected snapshot layout in {path}")
	titles, index = payload['titles'], payload['index']
	if not isinstance(titles, dict) or not isinstance(index, dict):
		raise SnapshotError(f"Unexpected snapshot layout in {path}")

	logger.info(f"[Snapshot] Loaded {len(titles)} titles and {len(index)} tags from {path}")
	return titles, index
