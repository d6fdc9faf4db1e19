"""
Data models for the Film Connections generator.
Defines the core data structures used throughout the pipeline.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, asdict, field  # auto-generates __init__, __repr__, etc.
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional, Tuple  # lists, optional values, and fixed-size tuples

from .errors import RejectionLog  # per-run rejection tally


# Closed vocabularies shared across modules
VERIFICATION_TYPES = (
	'overview-keywords',  # keywords appear in the overview
	'title-contains',  # substring appears in the title
	'title-pattern',  # title matches a regular expression
	'genre-includes',  # film carries a genre id
	'director',  # film has a director (by person id)
	'actor',  # film has an actor (by person id)
	'decade',  # film was released in a decade
	'year-range',  # film was released within a year range
)
CATEGORIES = ('thematic', 'title', 'setting', 'plot', 'crew', 'cast')
DIFFICULTY_LEVELS = ('easy', 'medium', 'hard', 'hardest')
DIFFICULTY_COLORS = ('yellow', 'green', 'blue', 'purple')
SOURCE_DETERMINISTIC = 'deterministic'
SOURCE_AI = 'ai-thematic'

GROUP_SIZE = 4  # every connection group holds exactly four films


@dataclass(frozen=True)
class Genre:
	id: int  # TMDB genre id (e.g., 28 = Action)
	name: str  # display name


@dataclass(frozen=True)
class CastMember:
	id: int  # person id
	name: str  # credited name
	order: int  # billing order, 0 = top-billed
	character: str = ''  # role name if known


@dataclass(frozen=True)
class CrewMember:
	id: int  # person id
	name: str  # credited name
	job: str  # e.g., "Director", "Screenplay"
	department: str = ''  # e.g., "Directing"


@dataclass(frozen=True)
class FilmRecord:
	"""
	One film as delivered by the metadata source.
	Frozen: the pool is a read-only snapshot for the whole generation run.
	"""
	id: int  # unique film id
	title: str  # title as released (original casing)
	release_year: int  # 0 when unknown
	overview: str = ''  # free-text synopsis
	genres: Tuple[Genre, ...] = ()  # ordered; the first entry is the primary genre
	cast: Tuple[CastMember, ...] = ()  # credited cast with billing order
	crew: Tuple[CrewMember, ...] = ()  # credited crew with jobs
	vote_count: int = 0  # number of votes (popularity proxy)
	popularity: float = 0.0  # source popularity score
	poster_path: Optional[str] = None  # optional poster path for the UI

	def director(self) -> Optional[CrewMember]:
		"""Return the first crew member credited as Director, if any."""
		for member in self.crew:
			if member.job == 'Director':
				return member
		return None

	def top_cast(self, limit: int = 5) -> List[CastMember]:
		"""Return cast members whose billing order is below `limit`."""
		return [c for c in self.cast if c.order < limit]

	def genre_ids(self) -> List[int]:
		return [g.id for g in self.genres]


@dataclass
class VerificationParams:
	"""
	Parameters for a verification descriptor. Only the fields relevant to
	the verification type are read; everything else stays None.
	"""
	keywords: Optional[List[str]] = None  # overview-keywords
	require_all: bool = False  # overview-keywords: AND instead of OR
	substring: Optional[str] = None  # title-contains
	pattern: Optional[str] = None  # title-pattern
	genre_id: Optional[int] = None  # genre-includes
	person_id: Optional[int] = None  # director / actor
	decade: Optional[int] = None  # decade
	min_year: Optional[int] = None  # year-range
	max_year: Optional[int] = None  # year-range

	# Wire (camelCase) name -> attribute name
	WIRE_NAMES = {
		'keywords': 'keywords',
		'requireAll': 'require_all',
		'substring': 'substring',
		'pattern': 'pattern',
		'genreId': 'genre_id',
		'personId': 'person_id',
		'decade': 'decade',
		'minYear': 'min_year',
		'maxYear': 'max_year',
	}

	def to_dict(self) -> Dict[str, Any]:
		"""Return the camelCase wire form with unset fields omitted."""
		out: Dict[str, Any] = {}
		for wire, attr in self.WIRE_NAMES.items():
			value = getattr(self, attr)
			if attr == 'require_all':
				if value:
					out[wire] = True
				continue
			if value is not None:
				out[wire] = value
		return out


@dataclass
class CandidateGroup:
	"""
	A proposed set of four films sharing a claimed connection.
	Produced either by a deterministic discoverer or by validating an external suggestion.
	"""
	films: List[FilmRecord]  # exactly four distinct films
	connection_type: str  # director, actor, title-colors, genre, or an open label
	connection: str  # human-readable connection text
	category: str  # one of CATEGORIES
	verification_type: str  # one of VERIFICATION_TYPES
	verification_params: VerificationParams
	connection_value: str = ''  # raw attribute value (director name, title word, ...)
	explanation: str = ''
	source: str = SOURCE_DETERMINISTIC
	difficulty: Optional[str] = None  # author-declared label, if any

	def film_ids(self) -> List[int]:
		return [f.id for f in self.films]

	def fingerprint(self) -> Tuple[int, ...]:
		"""Sorted tuple of film ids identifying the exact film set."""
		return tuple(sorted(self.film_ids()))


@dataclass
class FilmVerificationResult:
	film_id: int
	film_title: str
	passed: bool
	reason: Optional[str] = None  # why it failed, if applicable


@dataclass
class VerificationResult:
	valid: bool  # AND over all films
	film_results: List[FilmVerificationResult]
	issues: List[str]  # one human-readable message per failing film
	verified_at: int  # epoch milliseconds


@dataclass(frozen=True)
class FilmSummary:
	"""Light film view stored alongside a group."""
	id: int
	title: str
	year: int
	poster_path: Optional[str] = None

	@classmethod
	def from_film(cls, film: FilmRecord) -> 'FilmSummary':
		return cls(id=film.id, title=film.title, year=film.release_year, poster_path=film.poster_path)


@dataclass(frozen=True)
class FormattedGroup:
	"""
	Final pipeline output handed to persistence. Never mutated after creation.
	"""
	films: Tuple[FilmSummary, ...]
	connection: str
	connection_type: str
	category: str
	verification_type: str
	verification_params: VerificationParams
	difficulty_score: int
	difficulty: str  # easy | medium | hard | hardest
	color: str  # yellow | green | blue | purple
	verified: bool
	source: str  # deterministic | ai-thematic
	explanation: str = ''
	verification_issues: Tuple[str, ...] = ()

	def film_ids(self) -> List[int]:
		return [f.id for f in self.films]


@dataclass
class GenerationResult:
	groups: List[FormattedGroup]  # accepted groups, at most max_groups_per_batch
	total_found: int  # groups produced by all sources before any filtering
	filtered_count: int  # total_found minus groups that survived dedup
	deterministic_count: int = 0
	ai_count: int = 0
	rejections: RejectionLog = field(default_factory=RejectionLog)  # dropped groups for the run
	state: str = 'done'


def to_group_input(group: FormattedGroup) -> Dict[str, Any]:
	"""
	Convert a FormattedGroup into the storage payload expected by persistence.
	New groups enter the pool as 'pending' for review.
	"""
	return {
		'films': [asdict(f) for f in group.films],
		'connection': group.connection,
		'connectionType': group.connection_type,
		'category': group.category,
		'difficultyScore': group.difficulty_score,
		'difficulty': group.difficulty,
		'color': group.color,
		'status': 'pending',
		'metadata': {
			'explanation': group.explanation,
			'source': group.source,
			'verified': group.verified,
			'verificationType': group.verification_type,
			'verificationParams': group.verification_params.to_dict(),
		},
	}
