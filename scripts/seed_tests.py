"""Seed a spellplay server with sample spelling tests.

Run from the project root: python -m scripts.seed_tests --server URL
"""

import argparse
import logging

from cli.api_client import SpellPlayAPIClient

logger = logging.getLogger(__name__)


def get_seed_tests():
    """Sample tests by grade.

    Returns list of {name, words, help_coins}; words are whitespace-separated.
    """
    return [
        {
            'name': 'Animals',
            'words': 'cat dog bird fish horse rabbit',
            'help_coins': 3
        },
        {
            'name': 'Colors',
            'words': 'red blue green yellow orange purple',
            'help_coins': 3
        },
        {
            'name': 'Days of the Week',
            'words': 'Monday Tuesday Wednesday Thursday Friday Saturday Sunday',
            'help_coins': 5
        },
        {
            'name': 'Tricky Words',
            'words': 'because friend people thought through beautiful',
            'help_coins': 5
        }
    ]


def seed(client: SpellPlayAPIClient) -> list[dict]:
    """Create every seed test the server does not already have (matched by name)."""
    existing = {t['name'] for t in client.list_tests()}
    created = []
    for test in get_seed_tests():
        if test['name'] in existing:
            logger.info(f"Skipping existing test '{test['name']}'")
            continue
        created.append(client.create_test(test['name'], test['words'], test['help_coins']))
        logger.info(f"Created test '{test['name']}'")
    return created


def main():
    parser = argparse.ArgumentParser(description='Seed spellplay with sample spelling tests')
    parser.add_argument('--server', default='http://localhost:8000', help='Server URL')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    created = seed(SpellPlayAPIClient(base_url=args.server))
    print(f"Created {len(created)} test(s)")


if __name__ == '__main__':
    main()
