"""
Shared pytest fixtures: film record factories and small ready-made pools.
"""

import pytest

from film_connections.models import CastMember, CrewMember, FilmRecord, Genre

# Letters that appear in none of the title-pattern words, so titles built from
# them never form title groups by accident
_SAFE_LETTERS = 'qzxjkvwupm'

ACTION = Genre(28, 'Action')
ADVENTURE = Genre(12, 'Adventure')


def safe_title(n: int) -> str:
	"""Distinct title for `n` that matches no title-pattern word (no digits, no vowels but 'u')."""
	return 'Qzx ' + ''.join(_SAFE_LETTERS[int(d)] for d in str(n))


def make_film(
	film_id: int,
	title: str = None,
	year: int = 2020,
	overview: str = None,
	genres=(ACTION, ADVENTURE),
	cast=((1, 'Actor One', 0),),
	directors=((100, 'Director One'),),
	votes: int = 1000,
	popularity: float = 50.0,
) -> FilmRecord:
	title = title if title is not None else f'Film {film_id}'
	return FilmRecord(
		id=film_id,
		title=title,
		release_year=year,
		overview=overview if overview is not None else f'A movie about {title.lower()}',
		genres=tuple(genres),
		cast=tuple(CastMember(id=i, name=n, order=o) for i, n, o in cast),
		crew=tuple(CrewMember(id=i, name=n, job='Director', department='Directing') for i, n in directors),
		vote_count=votes,
		popularity=popularity,
	)


@pytest.fixture
def nolan_films():
	"""Eight films by one director (id 525) and nothing else in common."""
	return [
		make_film(i, safe_title(i), genres=(), cast=(), directors=((525, 'Christopher Nolan'),))
		for i in range(1, 9)
	]


@pytest.fixture
def plain_pool():
	"""One hundred films: eight by director 525, the rest share no qualifying attribute."""
	films = []
	for i in range(1, 101):
		director = (525, 'Christopher Nolan') if i <= 8 else (1000 + i, f'Director {safe_title(i)}')
		films.append(make_film(i, safe_title(i), genres=(), cast=(), directors=(director,)))
	return films


@pytest.fixture
def generic_pool():
	"""Fifty films that all share director, actor, and genres (for orchestrator plumbing tests)."""
	return [make_film(i, safe_title(i)) for i in range(1, 51)]
