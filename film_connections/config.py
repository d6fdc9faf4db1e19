"""
Configuration models for group generation.
Validated pydantic models; every value is passed explicitly per generation call.
"""

from typing import List, Optional

# Pydantic for validated configuration objects
from pydantic import BaseModel, ConfigDict, Field


class PoolFilters(BaseModel):
	"""Pool filters applied before discovery. Unset (or zero) bounds are ignored."""
	model_config = ConfigDict(populate_by_name=True, frozen=True)

	min_year: Optional[int] = Field(default=None, alias='minYear')  # earliest release year
	max_year: Optional[int] = Field(default=None, alias='maxYear')  # latest release year
	min_vote_count: Optional[int] = Field(default=None, alias='minVoteCount')
	max_vote_count: Optional[int] = Field(default=None, alias='maxVoteCount')
	min_popularity: Optional[float] = Field(default=None, alias='minPopularity')
	allowed_genres: List[int] = Field(default_factory=list, alias='allowedGenres')  # keep films with any of these
	excluded_genres: List[int] = Field(default_factory=list, alias='excludedGenres')  # drop films with any of these


class GeneratorConfig(BaseModel):
	"""Settings for one GroupGenerator; defaults mirror the production batch job."""
	model_config = ConfigDict(populate_by_name=True, frozen=True)

	pool_filters: PoolFilters = Field(default_factory=PoolFilters, alias='poolFilters')
	max_groups_per_batch: int = Field(default=50, ge=1, alias='maxGroupsPerBatch')
	enabled_discoverers: List[str] = Field(
		default_factory=lambda: ['director', 'actor', 'title', 'genre'],
		alias='enabledDiscoverers',
	)
	min_pool_size: int = Field(default=20, ge=0, alias='minPoolSize')  # filtered pool must reach this
	max_discovered_groups: int = Field(default=50, ge=1, alias='maxDiscoveredGroups')  # cap after priority sort
	prefer_diversity: bool = Field(default=True, alias='preferDiversity')  # one group per category first
	shuffle_pool: bool = Field(default=False, alias='shufflePool')  # shuffle filtered pool with the injected rng
	use_popularity: bool = Field(default=True, alias='usePopularity')  # nudge deterministic scores by vote counts
	recent_fuzzy_threshold: Optional[int] = Field(default=None, ge=0, le=100, alias='recentFuzzyThreshold')
	max_workers: int = Field(default=4, ge=1, alias='maxWorkers')  # discovery threads
