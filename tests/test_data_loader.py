"""
Unit tests for DataLoader: JSONL/JSON film loading and suggestion files.
Run: pytest tests/test_data_loader.py
"""

import json

import pytest

from film_connections.data_loader import DataLoader


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


HEAT = {
	'id': 949,
	'title': ' Heat ',
	'release_date': '1995-12-15',
	'overview': 'A group of professional bank robbers...',
	'genres': [{'id': 28, 'name': 'Action'}, {'id': 80, 'name': 'Crime'}],
	'credits': {
		'cast': [{'id': 1158, 'name': 'Al Pacino', 'order': 0}, {'id': 380, 'name': 'Robert De Niro', 'order': 1}],
		'crew': [{'id': 638, 'name': 'Michael Mann', 'job': 'Director', 'department': 'Directing'}],
	},
	'vote_count': 7000,
	'popularity': 40.5,
}


@pytest.fixture
def loader():
	return DataLoader()


def test_parse_film_nested_credits(loader):
	film = loader.parse_film(HEAT)
	assert_equal(film.title, 'Heat', "title stripped")
	assert_equal(film.release_year, 1995, "year from release_date")
	assert_equal(film.genre_ids(), [28, 80], "genre ids kept in order")
	assert_equal(film.director().name, 'Michael Mann', "director")
	assert_equal([c.name for c in film.top_cast()], ['Al Pacino', 'Robert De Niro'], "cast")
	assert_equal(film.vote_count, 7000, "votes")


def test_parse_film_flat_credits_and_genre_ids(loader):
	film = loader.parse_film({
		'id': 1, 'title': 'Flat', 'year': 2001, 'genre_ids': [27],
		'cast': [{'id': 5, 'name': 'A'}, {'id': 6, 'name': 'B'}],
	})
	assert_equal(film.release_year, 2001, "year field")
	assert_equal(film.genres[0].name, 'Horror', "genre name from id")
	assert_equal([c.order for c in film.cast], [0, 1], "order defaults to position")
	assert film.director() is None


def test_parse_film_requires_id_and_title(loader):
	with pytest.raises(ValueError):
		loader.parse_film({'id': 3})


def test_jsonl_skips_bad_lines(loader, tmp_path):
	path = tmp_path / 'films.jsonl'
	lines = [json.dumps(HEAT), '{not json', '', json.dumps({'title': 'No id'}), json.dumps({'id': 2, 'title': 'Two'})]
	path.write_text('\n'.join(lines), encoding='utf-8')
	films = loader.load_films_from_jsonl(path)
	assert_equal([f.id for f in films], [949, 2], "valid lines only")


def test_missing_file_raises(loader, tmp_path):
	with pytest.raises(FileNotFoundError):
		loader.load_films_from_jsonl(tmp_path / 'nope.jsonl')


def test_json_results_wrapper(loader, tmp_path):
	path = tmp_path / 'films.json'
	path.write_text(json.dumps({'results': [HEAT]}), encoding='utf-8')
	assert_equal([f.id for f in loader.load_films_from_json(path)], [949], "results wrapper")


def test_load_suggestions(loader, tmp_path):
	path = tmp_path / 'suggestions.json'
	path.write_text(json.dumps({'groups': [{'connection': 'x'}]}), encoding='utf-8')
	assert_equal(len(loader.load_suggestions(path)), 1, "groups wrapper")

	path.write_text(json.dumps({'groups': 'oops'}), encoding='utf-8')
	with pytest.raises(ValueError):
		loader.load_suggestions(path)
