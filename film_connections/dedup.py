"""
Dedup and overlap filter.
Greedy, order-dependent: earlier groups win, later identical or near-identical groups are dropped.
"""

from typing import List, Sequence, Set, Tuple

from .errors import REASON_DUPLICATE, REASON_OVERLAP, RejectionEvent
from .models import CandidateGroup

# Console logging
from loguru import logger

OVERLAP_THRESHOLD = 3  # groups sharing this many films are "too similar"


def fingerprint(film_ids: Sequence[int]) -> Tuple[int, ...]:
	"""Sorted tuple of film ids identifying a group's exact film set."""
	return tuple(sorted(film_ids))


def shared_count(a: Set[int], b: Set[int]) -> int:
	return len(a & b)


def deduplicate_by_films(
	groups: Sequence[CandidateGroup],
	overlap_threshold: int = OVERLAP_THRESHOLD,
) -> Tuple[List[CandidateGroup], List[RejectionEvent]]:
	"""
	Single pass in input order. A group is rejected if its fingerprint was already
	accepted, or if it shares `overlap_threshold` or more films with any accepted group.
	Returns (accepted groups, rejection events).
	"""
	accepted: List[CandidateGroup] = []
	accepted_sets: List[Set[int]] = []
	seen: Set[Tuple[int, ...]] = set()
	rejected: List[RejectionEvent] = []

	for group in groups:
		ids = group.film_ids()
		key = fingerprint(ids)

		if key in seen:
			rejected.append(RejectionEvent('dedup', REASON_DUPLICATE, group.connection, f'film set {key}'))
			logger.debug(f"[Dedup] Duplicate film set dropped: '{group.connection}' {key}")
			continue

		id_set = set(ids)
		clash = next((i for i, other in enumerate(accepted_sets) if shared_count(id_set, other) >= overlap_threshold), None)
		if clash is not None:
			rejected.append(RejectionEvent(
				'dedup', REASON_OVERLAP, group.connection,
				f"shares {shared_count(id_set, accepted_sets[clash])} films with '{accepted[clash].connection}'",
			))
			logger.debug(f"[Dedup] High overlap dropped: '{group.connection}' vs '{accepted[clash].connection}'")
			continue

		seen.add(key)
		accepted.append(group)
		accepted_sets.append(id_set)

	logger.info(f"[Dedup] Kept {len(accepted)} of {len(groups)} groups ({len(rejected)} duplicate/overlapping)")
	return accepted, rejected
