"""
Deterministic discovery module.
Scans a film pool for groups of four that share an attribute by construction:
same director, same top-billed actor, a common title word, or the same primary genre.
These groups never need external verification.
"""

from collections import OrderedDict  # keep encounter order of grouping keys
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import ConfigError
from .models import GROUP_SIZE, CandidateGroup, FilmRecord, VerificationParams

# Console logging
from loguru import logger


# Only cast entries billed above this position count as "top-billed"
TOP_BILLING_THRESHOLD = 5

# Title words to look for, by pattern category
TITLE_PATTERNS: Dict[str, List[str]] = {
	'colors': ['red', 'blue', 'black', 'white', 'green', 'gold', 'silver', 'yellow', 'pink', 'purple', 'orange', 'grey', 'gray'],
	'numbers': [
		'one', 'two', 'three', 'four', 'five', 'six', 'seven', 'eight', 'nine', 'ten', 'eleven', 'twelve',
		'thirteen', 'hundred', 'thousand', 'million', '1', '2', '3', '4', '5', '6', '7', '8', '9', '0',
	],
	'animals': [
		'dog', 'cat', 'bird', 'wolf', 'lion', 'tiger', 'bear', 'snake', 'horse', 'dragon', 'shark', 'fish',
		'crow', 'swan', 'eagle', 'hawk', 'fox', 'rabbit', 'deer', 'monkey', 'ape', 'spider', 'bat',
	],
	'bodyParts': ['head', 'hand', 'heart', 'eye', 'eyes', 'blood', 'bone', 'face', 'finger', 'arm', 'leg', 'brain'],
	'timeWords': ['night', 'day', 'midnight', 'dawn', 'dusk', 'morning', 'evening', 'yesterday', 'tomorrow', 'forever', 'eternal'],
	'deathWords': ['dead', 'death', 'die', 'kill', 'murder', 'ghost', 'zombie'],
}

PATTERN_LABELS = {
	'colors': 'Color',
	'numbers': 'Number',
	'animals': 'Animal',
	'bodyParts': 'Body part',
	'timeWords': 'Time word',
	'deathWords': 'Death word',
}

# Lower value = preferred when capping discovered groups
CONNECTION_PRIORITY = {
	'director': 1,
	'actor': 2,
	'title-colors': 3,
	'title-animals': 4,
	'title-timeWords': 5,
	'title-deathWords': 6,
	'title-bodyParts': 7,
	'title-numbers': 8,
	'genre': 9,
}
DEFAULT_PRIORITY = 10


def chunk_into_groups(films: Sequence[FilmRecord], group_size: int = GROUP_SIZE) -> List[List[FilmRecord]]:
	"""Split films into consecutive groups of `group_size`; a short remainder is dropped."""
	return [list(films[i:i + group_size]) for i in range(0, len(films) - group_size + 1, group_size)]


def priority_of(group: CandidateGroup) -> int:
	return CONNECTION_PRIORITY.get(group.connection_type, DEFAULT_PRIORITY)


def is_well_formed(group: CandidateGroup) -> bool:
	"""True if the group holds exactly GROUP_SIZE distinct films."""
	ids = group.film_ids()
	return len(ids) == GROUP_SIZE and len(set(ids)) == GROUP_SIZE


class Discoverer:
	"""
	Base capability: analyze a pool and return groups that are true by construction.
	Subclasses only read the pool.
	"""
	name = 'base'

	def analyze(self, pool: Sequence[FilmRecord]) -> List[CandidateGroup]:
		raise NotImplementedError

	def __repr__(self) -> str:
		return f'{type(self).__name__}()'


class DirectorDiscoverer(Discoverer):
	"""Groups films by their (first credited) director."""
	name = 'director'

	def analyze(self, pool: Sequence[FilmRecord]) -> List[CandidateGroup]:
		by_director: 'OrderedDict[int, Tuple[str, List[FilmRecord]]]' = OrderedDict()
		for film in pool:
			director = film.director()
			if director is None:
				continue
			entry = by_director.setdefault(director.id, (director.name, []))
			entry[1].append(film)

		groups: List[CandidateGroup] = []
		for director_id, (name, films) in by_director.items():
			for chunk in chunk_into_groups(films):
				groups.append(CandidateGroup(
					films=chunk,
					connection_type='director',
					connection=f'Directed by {name}',
					category='crew',
					verification_type='director',
					verification_params=VerificationParams(person_id=director_id),
					connection_value=name,
					explanation=f"All four films were directed by {name}: {_titles(chunk)}",
				))
		logger.debug(f"[Discover] director: {len(by_director)} directors -> {len(groups)} groups")
		return groups


class ActorDiscoverer(Discoverer):
	"""Groups films by top-billed actors (billing order below TOP_BILLING_THRESHOLD)."""
	name = 'actor'

	def __init__(self, billing_threshold: int = TOP_BILLING_THRESHOLD):
		self.billing_threshold = billing_threshold

	def analyze(self, pool: Sequence[FilmRecord]) -> List[CandidateGroup]:
		by_actor: 'OrderedDict[int, Tuple[str, List[FilmRecord]]]' = OrderedDict()
		for film in pool:
			for actor in film.top_cast(self.billing_threshold):
				name, films = by_actor.setdefault(actor.id, (actor.name, []))
				# the same actor credited twice on one film counts once
				if films and films[-1].id == film.id:
					continue
				films.append(film)

		groups: List[CandidateGroup] = []
		for actor_id, (name, films) in by_actor.items():
			for chunk in chunk_into_groups(films):
				groups.append(CandidateGroup(
					films=chunk,
					connection_type='actor',
					connection=f'Starring {name}',
					category='cast',
					verification_type='actor',
					verification_params=VerificationParams(person_id=actor_id),
					connection_value=name,
					explanation=f"{name} stars in all four: {_titles(chunk)}",
				))
		logger.debug(f"[Discover] actor: {len(by_actor)} top-billed actors -> {len(groups)} groups")
		return groups


class TitlePatternDiscoverer(Discoverer):
	"""Groups films whose lowercase titles contain the same catalogue word."""
	name = 'title'

	def __init__(self, patterns: Optional[Dict[str, List[str]]] = None):
		self.patterns = patterns if patterns is not None else TITLE_PATTERNS

	def analyze(self, pool: Sequence[FilmRecord]) -> List[CandidateGroup]:
		lowered = [(film, film.title.lower()) for film in pool]  # lowercase once per film
		groups: List[CandidateGroup] = []

		for pattern_type, words in self.patterns.items():
			label = PATTERN_LABELS.get(pattern_type, 'Word')
			for word in words:
				needle = word.lower()
				matching = [film for film, title in lowered if needle in title]
				if len(matching) < GROUP_SIZE:
					continue
				for chunk in chunk_into_groups(matching):
					groups.append(CandidateGroup(
						films=chunk,
						connection_type=f'title-{pattern_type}',
						connection=f'Films with "{word}" in the title',
						category='title',
						verification_type='title-contains',
						verification_params=VerificationParams(substring=word),
						connection_value=f'{label} "{word}" in title',
						explanation=f'Each title contains the word "{word}"',
					))
		logger.debug(f"[Discover] title: {len(groups)} groups")
		return groups


class GenreDiscoverer(Discoverer):
	"""Groups films by their first-listed (primary) genre only."""
	name = 'genre'

	def analyze(self, pool: Sequence[FilmRecord]) -> List[CandidateGroup]:
		by_genre: 'OrderedDict[int, Tuple[str, List[FilmRecord]]]' = OrderedDict()
		for film in pool:
			if not film.genres:
				continue
			primary = film.genres[0]
			by_genre.setdefault(primary.id, (primary.name, []))[1].append(film)

		groups: List[CandidateGroup] = []
		for genre_id, (name, films) in by_genre.items():
			for chunk in chunk_into_groups(films):
				groups.append(CandidateGroup(
					films=chunk,
					connection_type='genre',
					connection=f'{name} films',
					category='plot',
					verification_type='genre-includes',
					verification_params=VerificationParams(genre_id=genre_id),
					connection_value=name,
					explanation=f'All are {name} films',
				))
		logger.debug(f"[Discover] genre: {len(by_genre)} primary genres -> {len(groups)} groups")
		return groups


DISCOVERER_TYPES = {
	'director': DirectorDiscoverer,
	'actor': ActorDiscoverer,
	'title': TitlePatternDiscoverer,
	'genre': GenreDiscoverer,
}
DEFAULT_DISCOVERERS = ('director', 'actor', 'title', 'genre')


def build_discoverers(names: Iterable[str]) -> List[Discoverer]:
	"""Instantiate discoverers by configuration name, preserving the given order."""
	discoverers = []
	for name in names:
		cls = DISCOVERER_TYPES.get(name)
		if cls is None:
			raise ConfigError(f"Unknown discoverer '{name}' (expected one of {sorted(DISCOVERER_TYPES)})")
		discoverers.append(cls())
	return discoverers


def sort_by_priority(groups: List[CandidateGroup]) -> List[CandidateGroup]:
	"""Stable sort: director > actor > title subtypes > genre > anything else."""
	return sorted(groups, key=priority_of)


def discover_all(
	pool: Sequence[FilmRecord],
	discoverers: Optional[Sequence[Discoverer]] = None,
	max_groups: int = 50,
) -> List[CandidateGroup]:
	"""Run discoverers sequentially, sort by priority, and cap to `max_groups`."""
	if discoverers is None:
		discoverers = build_discoverers(DEFAULT_DISCOVERERS)

	found: List[CandidateGroup] = []
	for discoverer in discoverers:
		found.extend(discoverer.analyze(pool))

	found = [g for g in found if is_well_formed(g)]
	ranked = sort_by_priority(found)
	logger.info(f"[Discover] {len(found)} groups from {len(discoverers)} discoverers; keeping {min(max_groups, len(ranked))}")
	return ranked[:max_groups]


def _titles(films: Iterable[FilmRecord]) -> str:
	return ', '.join(f.title for f in films)
