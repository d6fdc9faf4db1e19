"""
Verification engine module.
Checks a claimed connection against the actual metadata of each film in a group.
A group is valid only if every one of its films passes.
"""

import re  # title-pattern checks
import time  # timestamp for results
from typing import Iterable, List, Optional

from .models import CandidateGroup, FilmRecord, FilmVerificationResult, VerificationParams, VerificationResult

# Console logging
from loguru import logger


class VerificationEngine:
	"""
	Stateless predicate evaluator: one verification type, one film at a time.
	Failures (including bad regex patterns) are reported, never raised.
	"""

	def __init__(self):
		# Dispatch table: verification type -> per-film check
		self._checks = {
			'overview-keywords': self._check_overview_keywords,
			'title-contains': self._check_title_contains,
			'title-pattern': self._check_title_pattern,
			'genre-includes': self._check_genre,
			'director': self._check_director,
			'actor': self._check_actor,
			'decade': self._check_decade,
			'year-range': self._check_year_range,
		}

	def verify(
		self,
		connection: str,
		verification_type: str,
		params: Optional[VerificationParams],
		films: Iterable[FilmRecord],
	) -> VerificationResult:
		"""Verify a connection claim against every film; valid iff all films pass."""
		params = params or VerificationParams()
		film_results: List[FilmVerificationResult] = []
		issues: List[str] = []

		for film in films:
			result = self.verify_film(film, verification_type, params)
			film_results.append(result)
			if not result.passed:
				issues.append(f'"{film.title}" does not match: {result.reason or connection}')

		valid = not issues
		if not valid:
			logger.debug(f"[Verify] '{connection}' ({verification_type}) failed for {len(issues)} film(s): {issues}")

		return VerificationResult(
			valid=valid,
			film_results=film_results,
			issues=issues,
			verified_at=int(time.time() * 1000),
		)

	def verify_group(self, group: CandidateGroup) -> VerificationResult:
		"""Verify a candidate group against its own verification descriptor."""
		return self.verify(group.connection, group.verification_type, group.verification_params, group.films)

	def verify_film(self, film: FilmRecord, verification_type: str, params: VerificationParams) -> FilmVerificationResult:
		check = self._checks.get(verification_type)
		if check is None:
			return self._fail(film, f'Unknown verification type: {verification_type}')
		try:
			return check(film, params)
		except (TypeError, AttributeError, ValueError) as e:
			# wrongly typed params fail the film like any other mismatch
			return self._fail(film, f'Invalid verification params: {e}')

	# -- per-type checks -------------------------------------------------

	def _check_overview_keywords(self, film: FilmRecord, params: VerificationParams) -> FilmVerificationResult:
		keywords = params.keywords or []
		if isinstance(keywords, str):
			keywords = [keywords]  # one keyword, not its characters
		if not keywords:
			return self._fail(film, 'No keywords provided')

		overview = (film.overview or '').lower()

		if params.require_all:
			# AND: every keyword must appear
			missing = [kw for kw in keywords if kw.lower() not in overview]
			if not missing:
				return self._pass(film)
			return self._fail(film, f"Overview missing keywords: {', '.join(missing)}")

		# OR (default): any keyword is enough
		if any(kw.lower() in overview for kw in keywords):
			return self._pass(film)
		return self._fail(film, f"Overview doesn't contain any of: {', '.join(keywords)}")

	def _check_title_contains(self, film: FilmRecord, params: VerificationParams) -> FilmVerificationResult:
		substring = params.substring
		if not substring:
			return self._fail(film, 'No substring provided')
		if substring.lower() in film.title.lower():
			return self._pass(film)
		return self._fail(film, f'Title doesn\'t contain "{substring}"')

	def _check_title_pattern(self, film: FilmRecord, params: VerificationParams) -> FilmVerificationResult:
		pattern = params.pattern
		if not pattern:
			return self._fail(film, 'No pattern provided')
		try:
			regex = re.compile(pattern, re.IGNORECASE)
		except (re.error, TypeError):
			return self._fail(film, f'Invalid regex pattern: {pattern}')
		if regex.search(film.title):
			return self._pass(film)
		return self._fail(film, f'Title doesn\'t match pattern "{pattern}"')

	def _check_genre(self, film: FilmRecord, params: VerificationParams) -> FilmVerificationResult:
		genre_id = params.genre_id
		if genre_id is None:
			return self._fail(film, 'No genre ID provided')
		if genre_id in film.genre_ids():
			return self._pass(film)
		return self._fail(film, f"Film doesn't have genre ID {genre_id}")

	def _check_director(self, film: FilmRecord, params: VerificationParams) -> FilmVerificationResult:
		person_id = params.person_id
		if person_id is None:
			return self._fail(film, 'No person ID provided')
		if any(c.job == 'Director' and c.id == person_id for c in film.crew):
			return self._pass(film)
		return self._fail(film, f"Film doesn't have director with ID {person_id}")

	def _check_actor(self, film: FilmRecord, params: VerificationParams) -> FilmVerificationResult:
		person_id = params.person_id
		if person_id is None:
			return self._fail(film, 'No person ID provided')
		# Any billing position counts at verification time
		if any(a.id == person_id for a in film.cast):
			return self._pass(film)
		return self._fail(film, f"Film doesn't have actor with ID {person_id}")

	def _check_decade(self, film: FilmRecord, params: VerificationParams) -> FilmVerificationResult:
		decade = params.decade
		if decade is None:
			return self._fail(film, 'No decade provided')
		film_decade = (film.release_year // 10) * 10
		if film_decade == decade:
			return self._pass(film)
		return self._fail(film, f'Film is from {film_decade}s, not {decade}s')

	def _check_year_range(self, film: FilmRecord, params: VerificationParams) -> FilmVerificationResult:
		min_year, max_year = params.min_year, params.max_year
		if min_year is None and max_year is None:
			return self._fail(film, 'No year range provided')
		year = film.release_year
		passes_min = min_year is None or year >= min_year
		passes_max = max_year is None or year <= max_year
		if passes_min and passes_max:
			return self._pass(film)
		low = min_year if min_year is not None else '?'
		high = max_year if max_year is not None else '?'
		return self._fail(film, f'Film year {year} is outside range {low}-{high}')

	# -- helpers ---------------------------------------------------------

	@staticmethod
	def _pass(film: FilmRecord) -> FilmVerificationResult:
		return FilmVerificationResult(film_id=film.id, film_title=film.title, passed=True)

	@staticmethod
	def _fail(film: FilmRecord, reason: str) -> FilmVerificationResult:
		return FilmVerificationResult(film_id=film.id, film_title=film.title, passed=False, reason=reason)
