"""
Group generator module.
Runs the full pipeline: pool filtering, discovery and suggestion validation,
recent-connection exclusion, dedup, diversity-aware capping, and difficulty assignment.
"""

import random  # injectable random source for pool shuffling
from concurrent.futures import ThreadPoolExecutor  # discoverers run as independent tasks
from typing import Any, Iterable, List, Optional, Sequence, Set

# Fuzzy matching for near-identical recent connections
from rapidfuzz import fuzz, process

from .config import GeneratorConfig
from .dedup import deduplicate_by_films
from .difficulty import DifficultyAssigner, vote_bounds
from .discovery import Discoverer, build_discoverers, is_well_formed, sort_by_priority
from .errors import (
	REASON_FAILED_VERIFICATION,
	REASON_MALFORMED,
	REASON_RECENT,
	ConfigError,
	NoSourcesError,
	RejectionEvent,
	RejectionLog,
)
from .models import (
	GROUP_SIZE,
	SOURCE_AI,
	SOURCE_DETERMINISTIC,
	CandidateGroup,
	FilmRecord,
	FilmSummary,
	FormattedGroup,
	GenerationResult,
)
from .pool import apply_pool_filters, shuffled
from .suggestions import SuggestionValidator, ValidationOutcome
from .verification import VerificationEngine

# Import loguru for console logging
from loguru import logger


# Pipeline states, in order
STATE_FILTERING = 'filtering'
STATE_DISCOVERING = 'discovering'
STATE_VALIDATING = 'validating'
STATE_DEDUPING = 'deduping'
STATE_SELECTING = 'selecting'
STATE_DONE = 'done'


def normalize_connection(text: str) -> str:
	"""Lowercase and collapse whitespace so trivially different spellings compare equal."""
	return ' '.join((text or '').lower().split())


def select_diverse(groups: Sequence[CandidateGroup], max_count: int, prefer_diversity: bool = True) -> List[CandidateGroup]:
	"""
	Cap `groups` to `max_count`. With diversity on, each pick takes the first group from
	a category not yet used; once every available category is used, picks follow input order.
	"""
	if not prefer_diversity:
		return list(groups[:max_count])

	selected: List[CandidateGroup] = []
	used_categories: Set[str] = set()
	remaining = list(groups)

	while len(selected) < max_count and remaining:
		index = next((i for i, g in enumerate(remaining) if g.category and g.category not in used_categories), None)
		group = remaining.pop(index if index is not None else 0)
		selected.append(group)
		if group.category:
			used_categories.add(group.category)

	return selected


class GroupGenerator:
	"""
	High-level API combining discovery, validation, dedup, and difficulty assignment.
	Holds configuration and collaborators only; every call works on its own pool snapshot.
	"""

	def __init__(
		self,
		config: Optional[GeneratorConfig] = None,  # validated settings
		discoverers: Optional[Sequence[Discoverer]] = None,  # explicit discoverer list (overrides config names)
		engine: Optional[VerificationEngine] = None,  # shared verification engine
		assigner: Optional[DifficultyAssigner] = None,  # difficulty scoring
	):
		self.config = config or GeneratorConfig()
		self.engine = engine or VerificationEngine()
		self.validator = SuggestionValidator(self.engine)
		self.assigner = assigner or DifficultyAssigner(use_popularity=self.config.use_popularity)
		if discoverers is not None:
			self.discoverers = list(discoverers)
		else:
			self.discoverers = build_discoverers(self.config.enabled_discoverers)
		logger.info(f"[Generator] Ready with discoverers={[d.name for d in self.discoverers]} max_batch={self.config.max_groups_per_batch}")

	def generate(
		self,
		pool: Sequence[FilmRecord],  # raw film pool; suggestion indices refer to it
		suggestions: Optional[Sequence[Any]] = None,  # untrusted external suggestions
		recent_connections: Optional[Iterable[str]] = None,  # connection texts to exclude
		rng: Optional[random.Random] = None,  # random source for shuffling
		discoverers: Optional[Sequence[Discoverer]] = None,  # per-call override
	) -> GenerationResult:
		"""Run the pipeline and return accepted groups with run statistics."""
		cfg = self.config
		rng = rng or random.Random()
		discoverers = list(discoverers) if discoverers is not None else self.discoverers
		suggestions = list(suggestions or [])
		rejections = RejectionLog()

		# 1) Filter the pool
		self._enter(STATE_FILTERING)
		filtered = apply_pool_filters(pool, cfg.pool_filters)
		if len(filtered) < cfg.min_pool_size:
			raise ConfigError(
				f"Filtered movie pool too small: {len(filtered)} movies (minimum: {cfg.min_pool_size})"
			)
		if cfg.shuffle_pool:
			filtered = shuffled(filtered, rng)

		if not discoverers and not suggestions:
			raise NoSourcesError('No discoverers are enabled and no suggestions were supplied')

		# 2) Discover and validate concurrently; both only read the pool
		self._enter(STATE_DISCOVERING)
		discovered, malformed, outcome = self._run_sources(discoverers, filtered, suggestions, pool)
		total_found = len(discovered) + len(malformed) + len(suggestions)

		self._enter(STATE_VALIDATING)
		rejections.extend(malformed)
		rejections.extend(outcome.rejected)
		# every output group passes verification, discovered ones included
		deterministic = self._self_check(discovered, rejections)
		candidates = deterministic + outcome.accepted

		# 3) Exclude recently used connections
		candidates = self._exclude_recent(candidates, recent_connections, rejections)

		# 4) Dedup, strictly in order
		self._enter(STATE_DEDUPING)
		deduped, dedup_rejections = deduplicate_by_films(candidates)
		rejections.extend(dedup_rejections)

		# 5) Cap with diversity, 6) assign difficulty and provenance
		self._enter(STATE_SELECTING)
		selected = select_diverse(deduped, cfg.max_groups_per_batch, cfg.prefer_diversity)
		bounds = vote_bounds(filtered)
		groups = [self._format(g, bounds) for g in selected]

		self._enter(STATE_DONE)
		result = GenerationResult(
			groups=groups,
			total_found=total_found,
			filtered_count=total_found - len(deduped),
			deterministic_count=sum(1 for g in groups if g.source == SOURCE_DETERMINISTIC),
			ai_count=sum(1 for g in groups if g.source == SOURCE_AI),
			rejections=rejections,
			state=STATE_DONE,
		)
		logger.info(
			f"[Generator] Returning {len(groups)} groups | found={total_found} filtered={result.filtered_count} "
			f"rejections={dict(rejections.counts())}"
		)
		return result

	def _run_sources(
		self,
		discoverers: Sequence[Discoverer],
		filtered: Sequence[FilmRecord],
		suggestions: Sequence[Any],
		pool: Sequence[FilmRecord],
	):
		"""Run each discoverer (and suggestion validation) as its own task; merge in configured order."""
		with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
			futures = [executor.submit(d.analyze, filtered) for d in discoverers]
			validation = executor.submit(self.validator.validate, suggestions, pool) if suggestions else None

			found: List[CandidateGroup] = []
			malformed: List[RejectionEvent] = []
			for discoverer, future in zip(discoverers, futures):
				groups = future.result()
				logger.debug(f"[Generator] {discoverer.name}: {len(groups)} groups")
				for group in groups:
					if is_well_formed(group):
						found.append(group)
						continue
					detail = f'{discoverer.name} emitted film ids {group.film_ids()}, expected {GROUP_SIZE} distinct'
					malformed.append(RejectionEvent('discovery', REASON_MALFORMED, group.connection, detail))
					logger.warning(f"[Generator] Malformed discovered group: '{group.connection}' - {detail}")
			outcome = validation.result() if validation is not None else ValidationOutcome()

		ranked = sort_by_priority(found)[:self.config.max_discovered_groups]
		logger.info(f"[Generator] Discovered {len(found)} groups, kept {len(ranked)} after priority cap")
		return ranked, malformed, outcome

	def _self_check(self, groups: Sequence[CandidateGroup], rejections: RejectionLog) -> List[CandidateGroup]:
		kept = []
		for group in groups:
			result = self.engine.verify_group(group)
			if result.valid:
				kept.append(group)
			else:
				rejections.add(RejectionEvent('validation', REASON_FAILED_VERIFICATION, group.connection, '; '.join(result.issues)))
				logger.warning(f"[Generator] Discovered group failed verification: '{group.connection}'")
		return kept

	def _exclude_recent(
		self,
		groups: Sequence[CandidateGroup],
		recent_connections: Optional[Iterable[str]],
		rejections: RejectionLog,
	) -> List[CandidateGroup]:
		recent = [normalize_connection(c) for c in (recent_connections or []) if c]
		if not recent:
			return list(groups)

		recent_set = set(recent)
		threshold = self.config.recent_fuzzy_threshold
		kept = []
		for group in groups:
			text = normalize_connection(group.connection)
			match = text in recent_set
			if not match and threshold is not None:
				best = process.extractOne(text, recent, scorer=fuzz.ratio)
				match = best is not None and best[1] >= threshold
			if match:
				rejections.add(RejectionEvent('exclusion', REASON_RECENT, group.connection, 'recently used'))
				logger.debug(f"[Generator] Excluded recent connection: '{group.connection}'")
				continue
			kept.append(group)
		logger.info(f"[Generator] Recent-connection filter kept {len(kept)} of {len(groups)} groups")
		return kept

	def _format(self, group: CandidateGroup, bounds) -> FormattedGroup:
		score, difficulty, color = self.assigner.assign(group, bounds)
		return FormattedGroup(
			films=tuple(FilmSummary.from_film(f) for f in group.films),
			connection=group.connection,
			connection_type=group.connection_type,
			category=group.category,
			verification_type=group.verification_type,
			verification_params=group.verification_params,
			difficulty_score=score,
			difficulty=difficulty,
			color=color,
			verified=True,  # only verified groups get this far
			source=group.source,
			explanation=group.explanation,
		)

	@staticmethod
	def _enter(state: str):
		logger.debug(f"[Generator] State -> {state}")
