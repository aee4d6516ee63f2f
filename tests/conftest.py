"""
Shared fixtures: tiny gzip TSV corpora shaped like title.basics / title.ratings.
"""

import gzip
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from title_index.config import IndexConfig
from title_index.models import Title, TitleKind

BASICS_HEADER = ['tconst', 'titleType', 'primaryTitle', 'originalTitle', 'isAdult', 'startYear', 'endYear', 'runtimeMinutes', 'genres']
RATINGS_HEADER = ['tconst', 'averageRating', 'numVotes']

# (id, kind, primary, original, adult, year, runtime)
BASICS_ROWS = [
	('tt0133093', 'movie', 'The Matrix', 'The Matrix', '0', '1999', '136'),
	('tt10838180', 'movie', 'The Matrix Resurrections', 'The Matrix Resurrections', '0', '2021', '148'),
	('tt0234215', 'movie', 'The Matrix Reloaded', 'The Matrix Reloaded', '0', '2003', '138'),
	('tt0245429', 'movie', 'Spirited Away', 'Sen to Chihiro no kamikakushi', '0', '2001', '125'),
	('tt0903747', 'tvSeries', 'Breaking Bad', 'Breaking Bad', '0', '2008', '49'),
	('tt0000001', 'short', 'Carmencita', 'Carmencita', '0', '1894', '1'),
	('tt0000002', 'movie', 'Obscure Picture', 'Obscure Picture', '0', '1950', '90'),
	('tt0000003', 'movie', 'Adult Feature', 'Adult Feature', '1', '2000', '90'),
	('tt0000004', 'movie', 'Unknown Year', 'Unknown Year', '0', '\\N', '90'),
	('tt0000005', 'movie', 'No Runtime', 'No Runtime', '0', '2005', '\\N'),
	('tt0000006', 'movie', 'Zero Runtime', 'Zero Runtime', '0', '2005', '0'),
	('tt0000007', 'video', 'Alien Director Cut', 'Alien Director Cut', '0', '2003', '116'),
	('tt0000008', 'tvMovie', 'Tv Special', 'Tv Special', '\\N', '2010', '60'),
]

RATINGS_ROWS = [
	('tt0133093', '8.7', '2000000'),
	('tt10838180', '5.7', '300000'),
	('tt0234215', '7.2', '600000'),
	('tt0245429', '8.6', '800000'),
	('tt0903747', '9.5', '2000000'),
	('tt0000001', '5.7', '2000'),
	('tt0000002', '6.0', '10'),
	('tt0000003', '6.0', '500'),
	('tt0000004', '6.0', '500'),
	('tt0000005', '6.0', '500'),
	('tt0000006', '6.0', '500'),
	('tt0000007', '7.0', '5000'),
	('tt0000008', '7.0', '5000'),
]


def write_tsv_gz(path: Path, header, rows) -> Path:
	"""Write rows as a gzip-compressed, tab-separated file with a header line."""
	with gzip.open(path, 'wt', encoding='utf-8', newline='') as f:
		for row in [header] + list(rows):
			f.write('\t'.join(row) + '\n')
	return path


def make_title(title_id, primary, year, votes, kind=TitleKind.MOVIE, original=None, runtime=100):
	return Title(
		id=title_id,
		year=year,
		runtime=runtime,
		primary_title=primary,
		original_title=original,
		kind=kind,
		votes=votes,
	)


@pytest.fixture
def config():
	return IndexConfig()


@pytest.fixture
def corpus_dir(tmp_path, config):
	"""Directory holding both source files, as load_or_create expects them."""
	basics = [(i, k, p, o, a, y, '\\N', r, 'Drama') for i, k, p, o, a, y, r in BASICS_ROWS]
	write_tsv_gz(config.basics_path(tmp_path), BASICS_HEADER, basics)
	write_tsv_gz(config.ratings_path(tmp_path), RATINGS_HEADER, RATINGS_ROWS)
	return tmp_path
