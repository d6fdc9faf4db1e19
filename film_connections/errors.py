"""
Error taxonomy for group generation.
Fatal conditions raise; per-group rejections are recorded, counted, and never thrown.
"""

from collections import Counter  # per-reason tallies
from dataclasses import dataclass, field  # simple record types
from typing import List, Optional


class GroupGenerationError(ValueError):
	"""Base class for fatal generation errors."""


class ConfigError(GroupGenerationError):
	"""Configuration makes generation impossible (e.g., filtered pool below the minimum)."""


class NoSourcesError(GroupGenerationError):
	"""No discoverer is enabled and no suggestions were supplied."""


# Rejection reasons, grouped by the stage that emits them
REASON_MALFORMED = 'malformed'
REASON_FRANCHISE = 'franchise'
REASON_TRIVIAL = 'trivial'
REASON_FALSE_TITLE_CLAIM = 'false-title-claim'
REASON_UNVERIFIABLE = 'unverifiable'
REASON_FAILED_VERIFICATION = 'failed-verification'
REASON_RECENT = 'recent'
REASON_DUPLICATE = 'duplicate'
REASON_OVERLAP = 'overlap'


@dataclass(frozen=True)
class RejectionEvent:
	stage: str  # discovery | validation | exclusion | dedup
	reason: str  # one of the REASON_* constants
	connection: str  # connection text of the dropped group
	detail: Optional[str] = None  # human-readable context


@dataclass
class RejectionLog:
	"""Accumulates rejection events for one generation run."""
	events: List[RejectionEvent] = field(default_factory=list)

	def add(self, event: RejectionEvent):
		self.events.append(event)

	def extend(self, events: List[RejectionEvent]):
		self.events.extend(events)

	def counts(self) -> Counter:
		return Counter(e.reason for e in self.events)

	def count(self, reason: Optional[str] = None) -> int:
		if reason is None:
			return len(self.events)
		return sum(1 for e in self.events if e.reason == reason)

	def __len__(self) -> int:
		return len(self.events)
