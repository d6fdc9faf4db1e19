"""
Difficulty module.
Turns a group's strength signals into a numeric score and maps it onto the four color tiers.
"""

from typing import Optional, Sequence, Tuple

# NumPy for the vote-count popularity proxy
import numpy as np

from .models import CandidateGroup, FilmRecord

# Console logging
from loguru import logger


SCORE_MIN = 0
SCORE_MAX = 10000

# Upper bound (inclusive) of each band, lowest first; the last band is open-ended
DIFFICULTY_BANDS: Tuple[Tuple[int, str, str], ...] = (
	(3000, 'easy', 'yellow'),
	(6000, 'medium', 'green'),
	(8000, 'hard', 'blue'),
	(SCORE_MAX, 'hardest', 'purple'),
)

DIFFICULTY_TO_SCORE = {
	'easy': 2000,
	'medium': 5000,
	'hard': 7000,
	'hardest': 9000,
}

DIFFICULTY_TO_COLOR = {
	'easy': 'yellow',
	'medium': 'green',
	'hard': 'blue',
	'hardest': 'purple',
}

# Typical difficulty of each deterministic connection type
CONNECTION_TYPE_DIFFICULTY = {
	'director': 'easy',
	'actor': 'easy',
	'genre': 'easy',
	'title-colors': 'medium',
	'title-animals': 'medium',
	'title-numbers': 'medium',
	'title-bodyParts': 'medium',
	'title-timeWords': 'medium',
	'title-deathWords': 'hard',
}


def clamp_score(score: float) -> int:
	return int(max(SCORE_MIN, min(SCORE_MAX, round(score))))


def score_to_difficulty(score: float) -> Tuple[str, str]:
	"""
	Map a score to (difficulty, color). Total over all inputs: scores outside
	[SCORE_MIN, SCORE_MAX] clamp to the nearest band.
	"""
	clamped = clamp_score(score)
	for upper, difficulty, color in DIFFICULTY_BANDS:
		if clamped <= upper:
			return difficulty, color
	return DIFFICULTY_BANDS[-1][1], DIFFICULTY_BANDS[-1][2]


def vote_bounds(films: Sequence[FilmRecord]) -> Tuple[float, float]:
	"""Min/max vote counts across a pool, used to normalize the popularity proxy."""
	votes = np.array([f.vote_count or 0 for f in films], dtype=float)
	if votes.size == 0:
		return 0.0, 0.0
	return float(votes.min()), float(votes.max())


class DifficultyAssigner:
	"""
	Computes a strength score for each group:
	- declared label: author-supplied difficulty mapped to a fixed score
	- connection type: base score for deterministic groups (director/actor skew easy)
	- popularity: mean vote count of the four films, log-scaled against the pool;
	  well-known films pull the score down, obscure ones push it up
	"""

	def __init__(self, popularity_weight: float = 1000.0, use_popularity: bool = True):
		self.popularity_weight = popularity_weight
		self.use_popularity = use_popularity

	def score_for_label(self, difficulty: Optional[str]) -> int:
		return DIFFICULTY_TO_SCORE.get(difficulty or 'medium', DIFFICULTY_TO_SCORE['medium'])

	def base_score(self, connection_type: str) -> int:
		return DIFFICULTY_TO_SCORE[CONNECTION_TYPE_DIFFICULTY.get(connection_type, 'medium')]

	def score_group(self, group: CandidateGroup, bounds: Optional[Tuple[float, float]] = None) -> int:
		"""Score a group; declared labels win over computed scores."""
		if group.difficulty:
			return self.score_for_label(group.difficulty)

		score = float(self.base_score(group.connection_type))
		if self.use_popularity and bounds is not None:
			score += self._popularity_adjustment(group.films, bounds)
		return clamp_score(score)

	def assign(self, group: CandidateGroup, bounds: Optional[Tuple[float, float]] = None) -> Tuple[int, str, str]:
		"""Return (score, difficulty, color) for a group."""
		score = self.score_group(group, bounds)
		difficulty, color = score_to_difficulty(score)
		logger.debug(f"[Difficulty] '{group.connection}' -> {score} ({difficulty}/{color})")
		return score, difficulty, color

	def _popularity_adjustment(self, films: Sequence[FilmRecord], bounds: Tuple[float, float]) -> float:
		"""Signed adjustment in [-popularity_weight, +popularity_weight]."""
		low, high = np.log1p(bounds[0]), np.log1p(bounds[1])
		if high <= low:
			return 0.0  # no spread in the pool
		mean_votes = float(np.mean([f.vote_count or 0 for f in films])) if films else 0.0
		norm = (np.log1p(mean_votes) - low) / (high - low)
		norm = float(np.clip(norm, 0.0, 1.0))
		# norm 1.0 (most voted) -> -weight, norm 0.0 (least voted) -> +weight
		return (0.5 - norm) * 2.0 * self.popularity_weight
