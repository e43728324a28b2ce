"""Entry point for mindgym CLI client."""

import argparse
import sys

from cli.api_client import MindgymAPIClient
from cli.console import ConsoleUI, CONSOLE_GAMES


def main():
    parser = argparse.ArgumentParser(description='Mindgym - brain training rounds')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--user',
        default='default',
        help='User ID (default: default)'
    )
    parser.add_argument(
        '--game',
        choices=CONSOLE_GAMES,
        help='Play a single round of this game and exit'
    )
    args = parser.parse_args()

    client = MindgymAPIClient(base_url=args.server, user_id=args.user)
    ui = ConsoleUI(client)

    try:
        ui.run(game_id=args.game)
    except KeyboardInterrupt:
        print('\nGoodbye!')
        sys.exit(0)


if __name__ == '__main__':
    main()
