"""Pre-generate a question bank for every game and tier.

Usage:
    python -m scripts.seed_questions --storage file --per-tier 5
    python -m scripts.seed_questions --games wordle stroop_clash --seed 42
"""

import argparse
import logging
import os

from engine.config import MIN_TIER, MAX_TIER
from engine.content import GameType
from engine.generators import GeneratorConfig, generate_many
from server.file_storage import FileStorage
from server.postgres_storage import PostgresStorage

logger = logging.getLogger(__name__)


def build_bank(game_id: str, per_tier: int, seed: str | None = None) -> list[dict]:
    """Generate per_tier questions at each tier. Returns {content, difficulty} items."""
    items = []
    for tier in range(MIN_TIER, MAX_TIER + 1):
        tier_seed = f'{seed}:{game_id}:{tier}' if seed is not None else None
        config = GeneratorConfig(difficulty=tier, seed=tier_seed)
        for content in generate_many(game_id, config, per_tier):
            items.append({'content': content.to_dict(), 'difficulty': tier})
    return items


def main():
    parser = argparse.ArgumentParser(description='Seed the question bank')
    parser.add_argument('--storage', choices=['file', 'postgres'],
                        default=os.environ.get('MINDGYM_STORAGE', 'postgres'))
    parser.add_argument('--games', nargs='+', choices=[g.value for g in GameType],
                        default=[g.value for g in GameType])
    parser.add_argument('--per-tier', type=int, default=5)
    parser.add_argument('--seed', default=None, help='Make the bank reproducible')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    if args.storage == 'file':
        storage = FileStorage(state_dir=os.environ.get('MINDGYM_STATE_DIR'))
    else:
        storage = PostgresStorage()

    for game_id in args.games:
        items = build_bank(game_id, args.per_tier, args.seed)
        stored = storage.seed_questions(game_id, items)
        print(f"{game_id}: {stored} questions")


if __name__ == '__main__':
    main()
