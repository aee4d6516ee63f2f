"""
Tests for corpus ingestion: filters, parsing and fatal errors.
"""

import gzip
from dataclasses import replace

import pytest

from title_index.config import IndexConfig
from title_index.data_loader import CorpusLoader
from title_index.errors import CorpusParseError
from title_index.models import TitleKind

from conftest import BASICS_HEADER, RATINGS_HEADER, write_tsv_gz


def load(corpus_dir, config):
	return CorpusLoader(config).load(config.basics_path(corpus_dir), config.ratings_path(corpus_dir))


def test_votes_floor_and_prefix_stripping(corpus_dir, config):
	votes = CorpusLoader(config).load_votes(config.ratings_path(corpus_dir))
	assert votes[133093] == 2000000
	assert votes[10838180] == 300000
	assert 2 not in votes  # 10 votes, below the floor


def test_surviving_titles(corpus_dir, config):
	titles = load(corpus_dir, config)
	assert set(titles) == {133093, 10838180, 234215, 245429, 1, 7}


def test_title_fields(corpus_dir, config):
	titles = load(corpus_dir, config)
	matrix = titles[133093]
	assert matrix.year == 1999
	assert matrix.runtime == 136
	assert matrix.primary_title == 'The Matrix'
	assert matrix.original_title is None  # identical original title is not stored
	assert matrix.kind is TitleKind.MOVIE
	assert matrix.votes == 2000000
	assert matrix.imdb_id == 'tt0133093'


def test_distinct_original_title_is_kept(corpus_dir, config):
	spirited = load(corpus_dir, config)[245429]
	assert spirited.original_title == 'Sen to Chihiro no kamikakushi'


def test_kinds_outside_the_enumeration_are_dropped(corpus_dir, config):
	titles = load(corpus_dir, config)
	assert 903747 not in titles  # tvSeries
	assert titles[1].kind is TitleKind.SHORT
	assert titles[7].kind is TitleKind.VIDEO


def test_adult_missing_year_and_runtime_are_dropped(corpus_dir, config):
	titles = load(corpus_dir, config)
	for title_id in (3, 4, 5, 6):
		assert title_id not in titles
	assert 8 not in titles  # unparsable adult flag


def test_tighter_filters_never_add_titles(corpus_dir, config):
	baseline = set(load(corpus_dir, config))

	previous = baseline
	survivors = {}
	for min_votes in (50, 1000, 10000, 1000000, 10000000):
		stricter = set(load(corpus_dir, replace(config, min_votes=min_votes)))
		assert stricter <= previous
		survivors[min_votes] = previous = stricter
	assert survivors[1000000] == {133093}
	assert survivors[10000000] == set()

	movies_only = set(load(corpus_dir, replace(config, kinds=frozenset({TitleKind.MOVIE}))))
	assert movies_only <= baseline
	assert movies_only == {133093, 10838180, 234215, 245429}


def test_malformed_vote_count_is_fatal(tmp_path, config):
	path = write_tsv_gz(tmp_path / 'ratings.tsv.gz', RATINGS_HEADER, [('tt0000001', '5.0', '100'), ('tt0000002', '5.0', 'many')])
	with pytest.raises(CorpusParseError) as excinfo:
		CorpusLoader(config).load_votes(path)
	assert ':3:' in str(excinfo.value)
	assert isinstance(excinfo.value.__cause__, ValueError)


def test_malformed_id_is_fatal(tmp_path, config):
	path = write_tsv_gz(tmp_path / 'ratings.tsv.gz', RATINGS_HEADER, [('ttabc', '5.0', '100')])
	with pytest.raises(CorpusParseError):
		CorpusLoader(config).load_votes(path)


def test_short_row_is_fatal(tmp_path, config):
	path = write_tsv_gz(tmp_path / 'basics.tsv.gz', BASICS_HEADER, [('tt0000001', 'movie', 'Truncated')])
	with pytest.raises(CorpusParseError):
		CorpusLoader(config).load_titles(path, {1: 100})


def test_missing_file_is_fatal(tmp_path, config):
	with pytest.raises(CorpusParseError):
		CorpusLoader(config).load_votes(tmp_path / 'absent.tsv.gz')


def test_non_gzip_file_is_fatal(tmp_path, config):
	path = tmp_path / 'plain.tsv.gz'
	path.write_text('tconst\taverageRating\tnumVotes\ntt0000001\t5.0\t100\n')
	with pytest.raises(CorpusParseError):
		CorpusLoader(config).load_votes(path)


def test_truncated_gzip_is_fatal(tmp_path, config):
	path = write_tsv_gz(tmp_path / 'ratings.tsv.gz', RATINGS_HEADER, [('tt%07d' % i, '5.0', '100') for i in range(2000)])
	data = path.read_bytes()
	path.write_bytes(data[: len(data) // 2])
	with pytest.raises(CorpusParseError):
		CorpusLoader(config).load_votes(path)


def test_header_only_files_yield_nothing(tmp_path):
	config = IndexConfig()
	write_tsv_gz(config.basics_path(tmp_path), BASICS_HEADER, [])
	write_tsv_gz(config.ratings_path(tmp_path), RATINGS_HEADER, [])
	assert load(tmp_path, config) == {}


def test_title_without_votes_entry_is_dropped(tmp_path, config):
	basics = write_tsv_gz(tmp_path / 'basics.tsv.gz', BASICS_HEADER, [
		('tt0000009', 'movie', 'Forgotten', 'Forgotten', '0', '1990', '\\N', '95', 'Drama'),
	])
	assert CorpusLoader(config).load_titles(basics, {}) == {}


def test_gzip_reading_uses_text_mode(tmp_path, config):
	path = tmp_path / 'ratings.tsv.gz'
	with gzip.open(path, 'wb') as f:
		f.write('tconst\taverageRating\tnumVotes\r\ntt0000001\t5.0\t100\r\n'.encode('utf-8'))
	assert CorpusLoader(config).load_votes(path) == {1: 100}


@pytest.mark.parametrize('raw_votes', ['1_000', ' 100 ', '+100', '-100', '١٠٠', '100.0', ''])
def test_non_digit_vote_count_is_fatal(tmp_path, config, raw_votes):
	path = write_tsv_gz(tmp_path / 'ratings.tsv.gz', RATINGS_HEADER, [('tt0000001', '5.0', raw_votes)])
	with pytest.raises(CorpusParseError):
		CorpusLoader(config).load_votes(path)


@pytest.mark.parametrize('raw_id', ['tt1_000', 'tt 100', 'tt+100', 'tt١٠٠', 'tt'])
def test_non_digit_title_id_is_fatal(tmp_path, config, raw_id):
	path = write_tsv_gz(tmp_path / 'ratings.tsv.gz', RATINGS_HEADER, [(raw_id, '5.0', '100')])
	with pytest.raises(CorpusParseError):
		CorpusLoader(config).load_votes(path)


@pytest.mark.parametrize('field, value', [
	('year', '1_999'), ('year', ' 1999'), ('year', '+1999'), ('year', '١٩٩٩'), ('year', '70000'),
	('runtime', '1_36'), ('runtime', '136 '), ('runtime', '+136'), ('runtime', '١٣٦'),
	('adult', '+0'), ('adult', ' 0'), ('adult', '٠'), ('adult', '256'),
])
def test_non_digit_optional_fields_skip_the_row(tmp_path, config, field, value):
	columns = {'adult': '0', 'year': '1999', 'runtime': '136'}
	columns[field] = value
	path = write_tsv_gz(tmp_path / 'basics.tsv.gz', BASICS_HEADER, [
		('tt0133093', 'movie', 'The Matrix', 'The Matrix', columns['adult'], columns['year'], '\\N', columns['runtime'], 'Action'),
	])
	assert CorpusLoader(config).load_titles(path, {133093: 100}) == {}


def test_plain_digit_optional_fields_are_kept(tmp_path, config):
	path = write_tsv_gz(tmp_path / 'basics.tsv.gz', BASICS_HEADER, [
		('tt0133093', 'movie', 'The Matrix', 'The Matrix', '0', '1999', '\\N', '136', 'Action'),
	])
	assert set(CorpusLoader(config).load_titles(path, {133093: 100})) == {133093}
