"""
Pool preparation module.
Filters a raw film pool, shuffles it with an injectable random source,
and can sample an era-balanced pool from an already-fetched collection.
"""

import math  # ceil for per-era quotas
import random  # injectable random source
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .config import PoolFilters
from .models import FilmRecord

# Console logging
from loguru import logger


@dataclass(frozen=True)
class EraConfig:
	name: str
	start_year: int
	end_year: int
	min_vote_count: int  # older films gather fewer votes


# Five eras, equal share each
ERAS = (
	EraConfig('Silent/Classic', 1920, 1959, 100),
	EraConfig('New Hollywood', 1960, 1979, 200),
	EraConfig('Blockbuster', 1980, 1999, 400),
	EraConfig('Modern', 2000, 2014, 500),
	EraConfig('Contemporary', 2015, 2025, 500),
)


@dataclass
class PoolBuildResult:
	films: List[FilmRecord]
	era_distribution: Dict[str, int]
	total_fetched: int


def passes_filters(film: FilmRecord, filters: PoolFilters) -> bool:
	"""Return True if a film survives every configured filter."""
	year = film.release_year
	if filters.min_year and year < filters.min_year:
		return False
	if filters.max_year and year > filters.max_year:
		return False

	votes = film.vote_count or 0
	if filters.min_vote_count and votes < filters.min_vote_count:
		return False
	if filters.max_vote_count and votes > filters.max_vote_count:
		return False

	if filters.min_popularity and (film.popularity or 0.0) < filters.min_popularity:
		return False

	genre_ids = set(film.genre_ids())
	if filters.allowed_genres and not genre_ids.intersection(filters.allowed_genres):
		return False
	if filters.excluded_genres and genre_ids.intersection(filters.excluded_genres):
		return False

	return True


def apply_pool_filters(films: Sequence[FilmRecord], filters: Optional[PoolFilters] = None) -> List[FilmRecord]:
	"""Return the films that pass `filters`, preserving input order."""
	if filters is None:
		return list(films)
	kept = [f for f in films if passes_filters(f, filters)]
	logger.info(f"[Pool] Filters kept {len(kept)} of {len(films)} films")
	return kept


def shuffled(items: Sequence, rng: Optional[random.Random] = None) -> list:
	"""Return a shuffled copy; pass a seeded rng for reproducible order."""
	rng = rng or random.Random()
	result = list(items)
	rng.shuffle(result)
	return result


def is_complete_film(film: FilmRecord) -> bool:
	"""Films need credits, a title, and a meaningful overview to be useful in a pool."""
	return bool(film.cast and film.crew and film.title and film.overview and len(film.overview) > 20)


def build_era_balanced_pool(
	films: Sequence[FilmRecord],
	target_size: int,
	rng: Optional[random.Random] = None,
	eras: Sequence[EraConfig] = ERAS,
) -> PoolBuildResult:
	"""
	Sample an equal share of films from each era out of an existing collection.
	Per-era vote thresholds keep classic films in play; the final pool is shuffled
	so eras are mixed. Films are never repeated across eras.
	"""
	rng = rng or random.Random()
	per_era = math.ceil(target_size / len(eras)) if eras else 0
	seen_ids = set()
	pool: List[FilmRecord] = []
	distribution: Dict[str, int] = {}

	for era in eras:
		candidates = [
			f for f in films
			if era.start_year <= f.release_year <= era.end_year
			and (f.vote_count or 0) >= era.min_vote_count
			and f.id not in seen_ids
			and is_complete_film(f)
		]
		picked = rng.sample(candidates, min(per_era, len(candidates)))
		for film in picked:
			seen_ids.add(film.id)
		pool.extend(picked)
		distribution[era.name] = len(picked)
		logger.debug(f"[Pool] Era '{era.name}': {len(picked)} of {len(candidates)} eligible films")

	pool = shuffled(pool, rng)
	logger.info(f"[Pool] Built era-balanced pool of {len(pool)} films | {distribution}")
	return PoolBuildResult(films=pool, era_distribution=distribution, total_fetched=len(pool))
