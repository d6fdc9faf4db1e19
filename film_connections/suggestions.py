"""
Suggestion validation module.
Externally suggested groups are untrusted: each one passes a fixed sequence of
rule checks and is then re-verified against the real film metadata.
Only groups that survive every rule reach the pipeline.
"""

import re  # franchise / trivial / title-claim patterns
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Tuple

# Pydantic for the external suggestion contract
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import (
	REASON_FAILED_VERIFICATION,
	REASON_FALSE_TITLE_CLAIM,
	REASON_FRANCHISE,
	REASON_MALFORMED,
	REASON_TRIVIAL,
	REASON_UNVERIFIABLE,
	RejectionEvent,
)
from .models import CATEGORIES, GROUP_SIZE, SOURCE_AI, CandidateGroup, FilmRecord, VerificationParams
from .verification import VerificationEngine

# Console logging
from loguru import logger


class SuggestionParams(BaseModel):
	"""Verification parameters of a suggestion (camelCase keys). Values are type-checked, unknown keys dropped."""
	model_config = ConfigDict(populate_by_name=True)

	keywords: Optional[List[str]] = None
	require_all: bool = Field(default=False, alias='requireAll')
	substring: Optional[str] = None
	pattern: Optional[str] = None
	genre_id: Optional[int] = Field(default=None, alias='genreId')
	person_id: Optional[int] = Field(default=None, alias='personId')
	decade: Optional[int] = None
	min_year: Optional[int] = Field(default=None, alias='minYear')
	max_year: Optional[int] = Field(default=None, alias='maxYear')

	def is_empty(self) -> bool:
		return not self.model_dump(exclude_defaults=True)

	def to_params(self) -> VerificationParams:
		return VerificationParams(**self.model_dump())


class Suggestion(BaseModel):
	"""One externally suggested group, as received (camelCase keys)."""
	model_config = ConfigDict(populate_by_name=True)

	connection: str
	film_indices: List[int] = Field(alias='filmIndices')  # positions in the pool passed to the pipeline
	difficulty: Literal['easy', 'medium', 'hard', 'hardest']
	explanation: str = ''
	verification_type: Optional[str] = Field(default=None, alias='verificationType')
	verification_params: Optional[SuggestionParams] = Field(default=None, alias='verificationParams')
	category: Optional[str] = None


# Well-known franchises; grouping sequels together is too easy
FRANCHISE_PATTERNS = [re.compile(p, re.IGNORECASE) for p in (
	r'harry potter',
	r'pirates of the caribbean',
	r'star wars',
	r'lord of the rings',
	r'fast (?:and |& )?furious',
	r'marvel',
	r'avengers',
	r'spider-?man',
	r'batman',
	r'transformers',
	r'mission impossible',
	r'jurassic (?:park|world)',
	r'toy story',
	r'shrek',
	r'predator',
	r'alien(?:s)?$',
	r'terminator',
	r'indiana jones',
	r'now you see me',
	r'john wick',
	r'matrix',
	r'hunger games',
	r'twilight',
	r'divergent',
	r'maze runner',
	r'x-?men',
	r'james bond|007',
	r'bourne',
	r'rocky|creed',
	r"ocean'?s",
)]
FRANCHISE_WORDS = re.compile(r'\b(franchise|series|saga|trilogy|quadrilogy|cinematic universe)\b', re.IGNORECASE)
FRANCHISE_TITLE_LIMIT = 3  # this many titles from one franchise = franchise grouping

# Low-information connections
TRIVIAL_PATTERNS = [re.compile(p, re.IGNORECASE) for p in (
	r'films? (?:with|that have|starting with|beginning with) [\'"]?the[\'"]? (?:in|as)',
	r'films? (?:with|that have) [\'"]?a[\'"]? as the first',
	r'films? with one[- ]word titles?',
	r'films? from the \d{4}s',
	r'\bfranchise films?\b',
	r'\bsequels?\b.*\bsame franchise\b',
)]


def is_question_title(title: str) -> bool:
	"""A title counts as a question only if it literally ends with '?'."""
	# "How the Grinch Stole Christmas" starts like a question but is a statement
	return title.strip().endswith('?')


# Connection phrasings that assert something about the title text itself
TITLE_CLAIMS: List[Tuple['re.Pattern', Callable[[str], bool]]] = [
	(re.compile(r'titles? (?:that )?(?:are|sound like|phrased as) questions?', re.IGNORECASE), is_question_title),
]

# Fallback category when a suggestion does not name one
CATEGORY_BY_VERIFICATION = {
	'overview-keywords': 'thematic',
	'title-contains': 'title',
	'title-pattern': 'title',
	'genre-includes': 'plot',
	'director': 'crew',
	'actor': 'cast',
	'decade': 'setting',
	'year-range': 'setting',
}


def infer_connection_type(connection: str) -> str:
	"""Guess a connection type label from free connection text."""
	lower = connection.lower()
	if 'directed by' in lower or 'director' in lower:
		return 'director'
	if 'starring' in lower or 'featuring' in lower or 'actor' in lower:
		return 'actor'
	if 'decade' in lower or "'s" in lower or re.search(r'\d{4}s', connection):
		return 'decade'
	if 'genre' in lower or 'horror' in lower or 'comedy' in lower:
		return 'genre'
	return 'thematic'


def is_franchise_group(connection: str, titles: Sequence[str]) -> bool:
	lowered = connection.lower()
	if any(p.search(lowered) for p in FRANCHISE_PATTERNS):
		return True
	if FRANCHISE_WORDS.search(connection):
		return True
	lowered_titles = [t.lower() for t in titles]
	for pattern in FRANCHISE_PATTERNS:
		if sum(1 for t in lowered_titles if pattern.search(t)) >= FRANCHISE_TITLE_LIMIT:
			return True
	return False


def is_trivial_connection(connection: str) -> bool:
	return any(p.search(connection) for p in TRIVIAL_PATTERNS)


def failing_title_claims(connection: str, titles: Sequence[str]) -> List[str]:
	"""Titles that contradict a structural claim made by the connection text."""
	failing: List[str] = []
	for pattern, holds in TITLE_CLAIMS:
		if pattern.search(connection):
			failing.extend(t for t in titles if not holds(t))
	return failing


@dataclass
class ValidationOutcome:
	accepted: List[CandidateGroup] = field(default_factory=list)
	rejected: List[RejectionEvent] = field(default_factory=list)


class SuggestionValidator:
	"""
	Rule gate for external suggestions. Rules run in order, first failure wins:
	malformed -> franchise -> trivial -> false title claim -> no descriptor -> failed verification.
	"""

	def __init__(self, engine: Optional[VerificationEngine] = None):
		self.engine = engine or VerificationEngine()

	def validate(self, suggestions: Sequence[Any], pool: Sequence[FilmRecord]) -> ValidationOutcome:
		"""Validate raw suggestions (dicts or Suggestion models) against the pool they index into."""
		outcome = ValidationOutcome()
		for raw in suggestions:
			group, event = self.validate_one(raw, pool)
			if group is not None:
				outcome.accepted.append(group)
			else:
				outcome.rejected.append(event)
				logger.warning(f"[Validate] Rejected ({event.reason}): '{event.connection}' - {event.detail}")
		logger.info(f"[Validate] Accepted {len(outcome.accepted)} of {len(suggestions)} suggestions")
		return outcome

	def validate_one(self, raw: Any, pool: Sequence[FilmRecord]) -> Tuple[Optional[CandidateGroup], Optional[RejectionEvent]]:
		# 1. Malformed
		try:
			suggestion = raw if isinstance(raw, Suggestion) else Suggestion.model_validate(raw)
		except ValidationError as e:
			connection = raw.get('connection', '') if isinstance(raw, dict) else ''
			return None, self._reject(REASON_MALFORMED, connection, f'schema: {e.error_count()} error(s)')

		indices = suggestion.film_indices
		if len(indices) != GROUP_SIZE:
			return None, self._reject(REASON_MALFORMED, suggestion.connection, f'{len(indices)} films instead of {GROUP_SIZE}')
		if any(i < 0 or i >= len(pool) for i in indices):
			return None, self._reject(REASON_MALFORMED, suggestion.connection, f'index out of bounds in {indices}')
		if len(set(indices)) != GROUP_SIZE:
			return None, self._reject(REASON_MALFORMED, suggestion.connection, f'repeated index in {indices}')

		films = [pool[i] for i in indices]
		titles = [f.title for f in films]

		# 2. Franchise clustering
		if is_franchise_group(suggestion.connection, titles):
			return None, self._reject(REASON_FRANCHISE, suggestion.connection, 'franchise grouping')

		# 3. Trivial title pattern
		if is_trivial_connection(suggestion.connection):
			return None, self._reject(REASON_TRIVIAL, suggestion.connection, 'trivial connection')

		# 4. Structural title claim that the titles do not support
		failing = failing_title_claims(suggestion.connection, titles)
		if failing:
			return None, self._reject(
				REASON_FALSE_TITLE_CLAIM, suggestion.connection, f"Titles don't match claim: {', '.join(failing)}",
			)

		# 5. No way to prove the claim
		params = suggestion.verification_params
		if not suggestion.verification_type or params is None or params.is_empty():
			return None, self._reject(REASON_UNVERIFIABLE, suggestion.connection, 'No verification params provided')

		# 6. Re-verify against the real metadata
		result = self.engine.verify(suggestion.connection, suggestion.verification_type, params.to_params(), films)
		if not result.valid:
			return None, self._reject(REASON_FAILED_VERIFICATION, suggestion.connection, '; '.join(result.issues))

		category = suggestion.category if suggestion.category in CATEGORIES else None
		group = CandidateGroup(
			films=films,
			connection_type=infer_connection_type(suggestion.connection),
			connection=suggestion.connection,
			category=category or CATEGORY_BY_VERIFICATION.get(suggestion.verification_type, 'thematic'),
			verification_type=suggestion.verification_type,
			verification_params=params.to_params(),
			connection_value=suggestion.connection,
			explanation=suggestion.explanation,
			source=SOURCE_AI,
			difficulty=suggestion.difficulty,
		)
		return group, None

	@staticmethod
	def _reject(reason: str, connection: str, detail: str) -> RejectionEvent:
		return RejectionEvent(stage='validation', reason=reason, connection=connection, detail=detail)


def prepare_films_for_suggestions(pool: Sequence[FilmRecord], cast_limit: int = 5) -> List[Dict[str, Any]]:
	"""
	Compact per-film view handed to an external suggestion generator.
	List positions are the indices suggestions must refer back to.
	"""
	prepared = []
	for film in pool:
		director = film.director()
		prepared.append({
			'id': film.id,
			'title': film.title,
			'year': film.release_year,
			'overview': film.overview or '',
			'director': director.name if director else None,
			'cast': [c.name for c in film.cast[:cast_limit]],
		})
	return prepared
