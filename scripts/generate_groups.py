"""
Generate a batch of connection groups.

This script:
1) Loads a film pool from data/films.jsonl (TMDB detail records), optionally era-balanced
2) Optionally loads external suggestions and recently used connections
3) Runs discovery, validation, dedup, and difficulty assignment
4) Writes the accepted groups (storage payloads) and run stats to output/groups.json

Usage:
    python -m scripts.generate_groups --films data/films.jsonl --suggestions data/suggestions.json

The output is what the persistence layer ingests as 'pending' groups.
"""

import argparse  # command-line options
import json  # write output payload
import random  # seeded runs
import time  # measure step timings
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from film_connections.config import GeneratorConfig  # validated settings
from film_connections.data_loader import DataLoader  # data ingestion
from film_connections.generator import GroupGenerator  # pipeline
from film_connections.models import to_group_input  # storage payload
from film_connections.pool import build_era_balanced_pool  # optional pool sampling


def parse_args():
	root = Path(__file__).resolve().parents[1]  # project root
	parser = argparse.ArgumentParser(description="Generate verified film connection groups")
	parser.add_argument('--films', default=str(root / 'data' / 'films.jsonl'), help="JSONL (or .json) film pool")
	parser.add_argument('--suggestions', default=None, help="JSON file of external suggestions")
	parser.add_argument('--recent', default=None, help="JSON list of recently used connection texts")
	parser.add_argument('--config', default=None, help="JSON generator config (camelCase keys accepted)")
	parser.add_argument('--pool-size', type=int, default=None, help="sample an era-balanced pool of this size first")
	parser.add_argument('--seed', type=int, default=None, help="seed for pool shuffling")
	parser.add_argument('--out', default=str(root / 'output' / 'groups.json'), help="output file")
	return parser.parse_args()


def main():
	args = parse_args()

	logger.info("=" * 60)
	logger.info("Generate Connection Groups")
	logger.info("=" * 60)

	# 1) Load data
	logger.info("[1/4] Loading films...")
	loader = DataLoader()
	if Path(args.films).suffix == '.json':
		films = loader.load_films_from_json(args.films)
	else:
		films = loader.load_films_from_jsonl(args.films)
	logger.info(f"[OK] Loaded {len(films)} films")
	rng = random.Random(args.seed) if args.seed is not None else random.Random()
	if args.pool_size:
		balanced = build_era_balanced_pool(films, args.pool_size, rng)
		films = balanced.films
		logger.info(f"[OK] Era-balanced pool: {balanced.era_distribution}")

	# 2) Optional inputs
	logger.info("\n[2/4] Loading suggestions, recent connections, and config...")
	suggestions = loader.load_suggestions(args.suggestions) if args.suggestions else []
	recent = set()
	if args.recent:
		with open(args.recent, 'r', encoding='utf-8') as f:
			recent = set(json.load(f))
	config = GeneratorConfig()
	if args.config:
		with open(args.config, 'r', encoding='utf-8') as f:
			config = GeneratorConfig.model_validate(json.load(f))
	logger.info(f"[OK] {len(suggestions)} suggestions | {len(recent)} recent connections")

	# 3) Run the pipeline
	logger.info("\n[3/4] Generating groups...")
	t0 = time.time()
	generator = GroupGenerator(config)
	result = generator.generate(films, suggestions=suggestions, recent_connections=recent, rng=rng)
	logger.info(f"[OK] {len(result.groups)} groups in {time.time() - t0:.2f}s")

	# 4) Write output
	logger.info("\n[4/4] Writing output...")
	out_path = Path(args.out)
	out_path.parent.mkdir(parents=True, exist_ok=True)
	payload = {
		'groups': [to_group_input(g) for g in result.groups],
		'stats': {
			'totalFound': result.total_found,
			'filteredCount': result.filtered_count,
			'deterministicCount': result.deterministic_count,
			'aiCount': result.ai_count,
			'rejections': dict(result.rejections.counts()),
		},
	}
	with open(out_path, 'w', encoding='utf-8') as f:
		json.dump(payload, f, ensure_ascii=False, indent=2)
	logger.info(f"[OK] Saved to {out_path}")
	logger.info("=" * 60)


if __name__ == '__main__':
	main()  # invoke generator
