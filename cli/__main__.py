"""Entry point for spellplay CLI client."""

import argparse
import logging
import sys

from cli.api_client import SpellPlayAPIClient
from cli.console import ConsoleUI


def main():
    parser = argparse.ArgumentParser(description='SpellPlay - spelling practice')
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
        '--test',
        default=None,
        help='Spelling test ID to practice (default: choose from a list)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Show debug logging'
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    client = SpellPlayAPIClient(base_url=args.server, user_id=args.user)
    ui = ConsoleUI(client, test_id=args.test)

    try:
        ui.run()
    except KeyboardInterrupt:
        print('\nGoodbye!')
        sys.exit(0)


if __name__ == '__main__':
    main()
