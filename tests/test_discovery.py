"""
Unit tests for the deterministic discoverers and priority ordering.
Run: pytest tests/test_discovery.py
"""

import pytest

from film_connections.discovery import (
	ActorDiscoverer,
	DirectorDiscoverer,
	GenreDiscoverer,
	TitlePatternDiscoverer,
	build_discoverers,
	chunk_into_groups,
	discover_all,
	sort_by_priority,
)
from film_connections.errors import ConfigError
from film_connections.models import Genre
from film_connections.verification import VerificationEngine

from conftest import make_film, safe_title


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def test_chunking_drops_remainder():
	films = [make_film(i) for i in range(1, 11)]
	chunks = chunk_into_groups(films)
	assert_equal([len(c) for c in chunks], [4, 4], "ten films -> two groups of four")
	assert_equal([f.id for f in chunks[1]], [5, 6, 7, 8], "chunks keep pool order")


def test_director_groups_from_eight_films(nolan_films):
	groups = DirectorDiscoverer().analyze(nolan_films)
	assert_equal(len(groups), 2, "eight films -> two director groups")
	first = groups[0]
	assert_equal(first.connection, 'Directed by Christopher Nolan', "connection text")
	assert_equal(first.verification_type, 'director', "verification type")
	assert_equal(first.verification_params.person_id, 525, "person id")
	assert_equal(first.category, 'crew', "category")
	assert_equal(first.source, 'deterministic', "source")
	assert_equal(first.film_ids(), [1, 2, 3, 4], "first four in pool order")


def test_actor_below_billing_threshold_is_ignored():
	films = [make_film(i, safe_title(i), cast=((77, 'Bit Player', 10),)) for i in range(1, 9)]
	assert_equal(ActorDiscoverer().analyze(films), [], "order 10 actor is not top-billed")

	top = [make_film(i, safe_title(i), cast=((77, 'Lead Player', 4),)) for i in range(1, 5)]
	groups = ActorDiscoverer().analyze(top)
	assert_equal(len(groups), 1, "order 4 actor is top-billed")
	assert_equal(groups[0].connection, 'Starring Lead Player', "actor connection text")


def test_actor_credited_twice_counts_once():
	films = [
		make_film(i, safe_title(i), cast=((77, 'Double Role', 0), (77, 'Double Role', 1)))
		for i in range(1, 5)
	]
	groups = ActorDiscoverer().analyze(films)
	assert_equal(len(groups), 1, "duplicate credits do not inflate the group")
	assert_equal(len(set(groups[0].film_ids())), 4, "four distinct films")


def test_title_pattern_matches_substrings_case_insensitively():
	titles = ['The Red Violin', 'Redemption Road', 'Big RED One', 'Scarlet and Red', 'Blue Velvet']
	films = [make_film(i, t, genres=(), cast=()) for i, t in enumerate(titles, 1)]
	groups = TitlePatternDiscoverer({'colors': ['red']}).analyze(films)
	assert_equal(len(groups), 1, "four titles contain 'red'")
	group = groups[0]
	assert_equal(group.connection, 'Films with "red" in the title', "title connection text")
	assert_equal(group.connection_type, 'title-colors', "title connection type")
	assert_equal(group.verification_params.substring, 'red', "substring param")
	assert 5 not in group.film_ids()


def test_genre_uses_primary_genre_only():
	horror, comedy = Genre(27, 'Horror'), Genre(35, 'Comedy')
	films = [make_film(i, genres=(comedy, horror)) for i in range(1, 5)]
	groups = GenreDiscoverer().analyze(films)
	assert_equal(len(groups), 1, "one primary-genre group")
	assert_equal(groups[0].connection, 'Comedy films', "primary genre wins")
	assert_equal(groups[0].verification_params.genre_id, 35, "genre id")


def test_no_other_qualifying_attribute_yields_only_director_groups(plain_pool):
	groups = discover_all(plain_pool)
	assert_equal(len(groups), 2, "only the eight-film director qualifies")
	assert all(g.connection_type == 'director' for g in groups)


def test_discovered_groups_pass_verification():
	films = []
	for i in range(1, 13):
		title = f'The Red {safe_title(i)}' if i <= 4 else safe_title(i)
		films.append(make_film(i, title))
	engine = VerificationEngine()
	groups = discover_all(films)
	assert groups, "fixture produces groups"
	for group in groups:
		result = engine.verify_group(group)
		assert result.valid, f"'{group.connection}' failed: {result.issues}"


def test_priority_sort_is_stable_and_ordered():
	films = [make_film(i, f'Red {safe_title(i)}') for i in range(1, 5)]
	groups = (
		GenreDiscoverer().analyze(films)
		+ TitlePatternDiscoverer({'colors': ['red']}).analyze(films)
		+ ActorDiscoverer().analyze(films)
		+ DirectorDiscoverer().analyze(films)
	)
	ordered = [g.connection_type for g in sort_by_priority(groups)]
	assert_equal(ordered, ['director', 'actor', 'title-colors', 'genre'], "priority order")


def test_discover_all_caps_results():
	films = [make_film(i, safe_title(i)) for i in range(1, 41)]
	assert_equal(len(discover_all(films, max_groups=3)), 3, "capped to max_groups")


def test_build_discoverers_rejects_unknown_name():
	assert_equal([d.name for d in build_discoverers(['genre', 'director'])], ['genre', 'director'], "order kept")
	with pytest.raises(ConfigError):
		build_discoverers(['director', 'astrology'])
