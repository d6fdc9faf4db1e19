"""
Unit tests for VerificationEngine: per-type semantics, case rules, and failure reporting.
Run: pytest tests/test_verification.py
"""

from film_connections.models import Genre, VerificationParams
from film_connections.verification import VerificationEngine

from conftest import make_film


engine = VerificationEngine()


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def test_empty_keywords_fail_every_film():
	films = [make_film(i, overview='a heist in the city') for i in range(1, 5)]
	result = engine.verify('Heists', 'overview-keywords', VerificationParams(keywords=[]), films)
	assert not result.valid
	assert all(not r.passed for r in result.film_results)
	assert all(r.reason == 'No keywords provided' for r in result.film_results)
	assert_equal(len(result.issues), 4, "one issue per failing film")


def test_overview_keywords_any_vs_all():
	films = [
		make_film(1, overview='A daring BANK heist goes wrong.'),
		make_film(2, overview='Thieves plan a heist.'),
		make_film(3, overview='A bank manager has a secret.'),
		make_film(4, overview='The heist at the bank of England.'),
	]
	any_result = engine.verify('Heists', 'overview-keywords', VerificationParams(keywords=['Heist', 'bank']), films)
	assert any_result.valid, "OR mode passes when any keyword matches"

	all_result = engine.verify(
		'Bank heists', 'overview-keywords', VerificationParams(keywords=['heist', 'BANK'], require_all=True), films,
	)
	assert not all_result.valid
	failed = [r.film_id for r in all_result.film_results if not r.passed]
	assert_equal(failed, [2, 3], "AND mode fails films missing a keyword")
	assert 'Overview missing keywords' in all_result.film_results[1].reason


def test_title_contains_is_case_insensitive():
	films = [make_film(1, 'RED Dawn'), make_film(2, 'Seeing red'), make_film(3, 'The Red Tent'), make_film(4, 'Red October')]
	assert engine.verify('Red', 'title-contains', VerificationParams(substring='rEd'), films).valid

	missing = engine.verify('Red', 'title-contains', VerificationParams(), films)
	assert not missing.valid
	assert missing.film_results[0].reason == 'No substring provided'


def test_title_pattern_matches_and_invalid_pattern_does_not_raise():
	films = [make_film(1, 'Who Framed Roger Rabbit?'), make_film(2, 'Where Eagles Dare'), make_film(3, 'What Lies Beneath'), make_film(4, 'Why Him?')]
	assert engine.verify('W-words', 'title-pattern', VerificationParams(pattern=r'^wh'), films).valid

	bad = engine.verify('Broken', 'title-pattern', VerificationParams(pattern='(unclosed'), films)
	assert not bad.valid
	assert all(r.reason == 'Invalid regex pattern: (unclosed' for r in bad.film_results)


def test_genre_includes_checks_full_genre_set():
	films = [make_film(i, genres=(Genre(35, 'Comedy'), Genre(27, 'Horror'))) for i in range(1, 4)]
	films.append(make_film(4, genres=(Genre(35, 'Comedy'),)))
	result = engine.verify('Horror', 'genre-includes', VerificationParams(genre_id=27), films)
	assert not result.valid
	assert_equal([r.passed for r in result.film_results], [True, True, True, False], "genre membership per film")


def test_director_requires_director_job_and_actor_ignores_billing():
	films = [make_film(i, directors=((525, 'Christopher Nolan'),), cast=((6193, 'Leonardo DiCaprio', 12),)) for i in range(1, 5)]
	assert engine.verify('Nolan', 'director', VerificationParams(person_id=525), films).valid
	assert not engine.verify('Nolan', 'director', VerificationParams(person_id=6193), films).valid
	assert engine.verify('DiCaprio', 'actor', VerificationParams(person_id=6193), films).valid
	assert not engine.verify('Nobody', 'actor', VerificationParams(), films).valid


def test_decade_boundaries():
	film_1989 = [make_film(1, year=1989)]
	assert engine.verify('80s', 'decade', VerificationParams(decade=1980), film_1989).valid
	result = engine.verify('90s', 'decade', VerificationParams(decade=1990), film_1989)
	assert not result.valid
	assert_equal(result.film_results[0].reason, 'Film is from 1980s, not 1990s', "decade failure reason")


def test_year_range_bounds():
	films = [make_film(1, year=1995), make_film(2, year=2000), make_film(3, year=2005)]
	assert engine.verify('Y2K', 'year-range', VerificationParams(min_year=1995, max_year=2005), films).valid
	assert engine.verify('Open top', 'year-range', VerificationParams(min_year=1990), films).valid
	assert not engine.verify('Too early', 'year-range', VerificationParams(max_year=1999), films).valid
	none = engine.verify('No range', 'year-range', VerificationParams(), films)
	assert not none.valid
	assert none.film_results[0].reason == 'No year range provided'


def test_unknown_type_fails_and_issues_are_keyed_by_title():
	films = [make_film(1, 'Heat')]
	result = engine.verify('Mystery claim', 'vibes', VerificationParams(), films)
	assert not result.valid
	assert_equal(result.issues, ['"Heat" does not match: Unknown verification type: vibes'], "issue format")


def test_params_wire_form_omits_unset_fields():
	params = VerificationParams(person_id=525, require_all=True)
	assert_equal(params.to_dict(), {'requireAll': True, 'personId': 525}, "camelCase wire form")


def test_wrongly_typed_params_fail_instead_of_raising():
	films = [make_film(1, 'Heat', year=1995, overview='A quiet drama on a farm.')]
	cases = [
		('title-contains', VerificationParams(substring=7)),
		('title-pattern', VerificationParams(pattern=7)),
		('year-range', VerificationParams(min_year='2000')),
		('decade', VerificationParams(decade='1990')),
	]
	for verification_type, params in cases:
		result = engine.verify('Bad params', verification_type, params, films)
		assert not result.valid, f"{verification_type} should fail"
		assert_equal(len(result.issues), 1, f"{verification_type} reports one issue")


def test_single_string_keyword_is_one_keyword():
	farm = [make_film(1, overview='A quiet drama on a farm.')]
	heist = [make_film(2, overview='One last heist.')]
	assert not engine.verify('Heists', 'overview-keywords', VerificationParams(keywords='heist'), farm).valid
	assert engine.verify('Heists', 'overview-keywords', VerificationParams(keywords='heist'), heist).valid
