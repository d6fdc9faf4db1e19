"""
Data loading and preprocessing module.
Handles loading film records (TMDB detail shape) and external suggestions from JSON/JSONL.
"""

# Standard libs for JSON parsing, typing, and paths
import json  # read JSON lines
from typing import Any, Dict, List, Optional  # type hints
from pathlib import Path  # filesystem-safe paths

# Import our record types used across the project
from .models import CastMember, CrewMember, FilmRecord, Genre  # structured film record

# Console logging
from loguru import logger  # console logger


class DataLoader:
	"""
	Handles loading and normalizing film metadata.
	"""

	# TMDB movie genre ids -> names, used when a record only carries genre_ids
	GENRE_NAMES = {
		28: 'Action',
		12: 'Adventure',
		16: 'Animation',
		35: 'Comedy',
		80: 'Crime',
		99: 'Documentary',
		18: 'Drama',
		10751: 'Family',
		14: 'Fantasy',
		36: 'History',
		27: 'Horror',
		10402: 'Music',
		9648: 'Mystery',
		10749: 'Romance',
		878: 'Science Fiction',
		10770: 'TV Movie',
		53: 'Thriller',
		10752: 'War',
		37: 'Western',
	}

	def __init__(self):
		"""Initialize the data loader and expose the genre name mapping."""
		self.genre_names = self.GENRE_NAMES  # store mapping for reuse

	def load_films_from_jsonl(self, filepath: str) -> List[FilmRecord]:
		"""
		Load films from a JSON Lines file where each line is one TMDB-style movie object.
		Malformed lines are logged and skipped.
		"""
		films = []  # accumulator for parsed records
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Film data file not found: {filepath}")

		logger.info(f"[DataLoader] Loading films from {filepath}...")

		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():
					continue  # blank line
				try:
					data = json.loads(line.strip())  # parse JSON object per line
					films.append(self.parse_film(data))  # convert dict -> FilmRecord
				except json.JSONDecodeError as e:
					logger.warning(f"[DataLoader] Skipping invalid JSON at line {line_num}: {e}")
					continue
				except (KeyError, TypeError, ValueError) as e:
					logger.warning(f"[DataLoader] Error parsing film at line {line_num}: {e}")
					continue

		logger.info(f"[DataLoader] Successfully loaded {len(films)} films.")
		return films

	def load_films_from_json(self, filepath: str) -> List[FilmRecord]:
		"""Load films from a JSON file holding a list (or {"films": [...]} / {"results": [...]})."""
		data = self._read_json(filepath)
		if isinstance(data, dict):
			data = data.get('films') or data.get('results') or []

		films = []
		for position, item in enumerate(data):
			try:
				films.append(self.parse_film(item))
			except (KeyError, TypeError, ValueError) as e:
				logger.warning(f"[DataLoader] Skipping film at position {position}: {e}")
		logger.info(f"[DataLoader] Successfully loaded {len(films)} films.")
		return films

	def load_suggestions(self, filepath: str) -> List[Dict[str, Any]]:
		"""
		Load raw external suggestions. Accepts {"groups": [...]} or a bare list.
		Entries are returned unvalidated; validation happens in the pipeline.
		"""
		data = self._read_json(filepath)
		groups = data.get('groups', []) if isinstance(data, dict) else data
		if not isinstance(groups, list):
			raise ValueError(f"Suggestions file {filepath} does not contain a list of groups")
		logger.info(f"[DataLoader] Loaded {len(groups)} suggestions from {filepath}")
		return groups

	def parse_film(self, data: Dict[str, Any]) -> FilmRecord:
		"""
		Convert a raw TMDB-style dictionary into a FilmRecord.
		Credits may be nested under 'credits' or given as flat 'cast'/'crew' lists.
		"""
		if 'id' not in data or not data.get('title'):
			raise ValueError("film record needs an 'id' and a 'title'")

		credits = data.get('credits') or {}
		cast_raw = credits.get('cast', data.get('cast')) or []
		crew_raw = credits.get('crew', data.get('crew')) or []

		cast = tuple(
			CastMember(
				id=int(c['id']),
				name=str(c.get('name', '')).strip(),
				order=int(c.get('order', position)),  # fall back to list position
				character=str(c.get('character') or ''),
			)
			for position, c in enumerate(cast_raw)
		)
		crew = tuple(
			CrewMember(
				id=int(c['id']),
				name=str(c.get('name', '')).strip(),
				job=str(c.get('job', '')),
				department=str(c.get('department') or ''),
			)
			for c in crew_raw
		)

		return FilmRecord(
			id=int(data['id']),
			title=str(data['title']).strip(),
			release_year=self._parse_year(data),
			overview=(data.get('overview') or '').strip(),
			genres=self._parse_genres(data),
			cast=cast,
			crew=crew,
			vote_count=int(data.get('vote_count') or 0),
			popularity=float(data.get('popularity') or 0.0),
			poster_path=data.get('poster_path'),
		)

	def _parse_genres(self, data: Dict[str, Any]) -> tuple:
		"""Prefer full genre objects; fall back to ids with names from GENRE_NAMES."""
		genres = data.get('genres')
		if genres:
			return tuple(Genre(id=int(g['id']), name=str(g.get('name', ''))) for g in genres)
		return tuple(Genre(id=int(gid), name=self.genre_names.get(int(gid), '')) for gid in (data.get('genre_ids') or []))

	def _parse_year(self, data: Dict[str, Any]) -> int:
		"""Year from 'release_date' (YYYY-MM-DD) or 'year'; 0 when unknown."""
		release_date: Optional[str] = data.get('release_date')
		if release_date and release_date[:4].isdigit():
			return int(release_date[:4])
		if data.get('year'):
			return int(data['year'])
		return 0

	def _read_json(self, filepath: str) -> Any:
		filepath = Path(filepath)
		if not filepath.exists():
			raise FileNotFoundError(f"File not found: {filepath}")
		with open(filepath, 'r', encoding='utf-8') as f:
			return json.load(f)
