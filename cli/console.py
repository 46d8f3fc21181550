"""Console UI for spellplay application."""

import requests

from cli.api_client import SpellPlayAPIClient


class ConsoleUI:
    """Console user interface for spellplay practice."""

    def __init__(self, client: SpellPlayAPIClient, test_id: str = None):
        self.client = client
        self.test_id = test_id

    def print_progress(self, progress: dict):
        """Print level, totals and streak."""
        print('\n' + '=' * 50)
        print('PROGRESS')
        print('=' * 50)
        print(f"Level {progress['level']} ({progress['experience_points']} XP, "
              f"{progress['experience_to_next_level']} to next level)")
        print(f"Points: {progress['total_points']} | Stars: {progress['total_stars']}")
        print(f"Words mastered: {progress['total_words_mastered']} | "
              f"Sessions: {progress['total_sessions_completed']}")
        print(f"Current streak: {progress['current_streak']} day(s)")
        print('=' * 50 + '\n')

    def print_status(self, state: dict):
        print('-' * 40)
        print(state['progress_text'])
        print(f"Points: {state['points']} | Stars: {state['total_stars']} | "
              f"Combo: {state['combo_count']} (x{state['combo_multiplier']})")
        print(f"Help coins: {state['help_coins']} | Words left to master: {state['words_remaining']}")
        print('-' * 40)

    def print_word_review(self, test: dict):
        print(f"\nWords in '{test['name']}':")
        for i, word in enumerate(test['words'], 1):
            print(f"  {i}. {word['text']}")
        print()

    def print_answer(self, result: dict):
        if result['is_correct']:
            points = result['points']
            line = f"Correct! +{points['total_points']} points"
            if points['combo_multiplier'] > 1:
                line += f" (combo x{points['combo_multiplier']})"
            if points['speed_bonus']:
                line += " (speed bonus)"
            print(line + ' ' + '*' * result['stars'])
        else:
            print("Not quite. You'll get another try next round.")

        if result['perfect_round_bonus']:
            print(f"Perfect round! +{result['perfect_round_bonus']} bonus points")
        if result['is_round_complete'] and not result['all_words_mastered']:
            remaining = result['state']['words_remaining']
            print(f"\n*** Round {result['round_number']}: {remaining} word(s) to try again ***\n")

    def print_completion(self, outcome: dict):
        print('\n' + '=' * 50)
        print(f"ALL WORDS MASTERED! {outcome['performance_grade']}")
        print('=' * 50)
        print(outcome['summary_text'])
        print(f"Streak: {outcome['streak']} day(s)")
        if outcome['level_up_occurred']:
            print(f"\n*** LEVEL UP! Now at level {outcome['new_level']} ***")
        for achievement in outcome['achievements']:
            print(f"\n{achievement['icon']} Achievement unlocked: {achievement['name']}")
            print(f"   {achievement['description']}")
        print()

    def choose_test(self) -> dict | None:
        tests = self.client.list_tests()
        if not tests:
            print("No spelling tests yet. Create one first (see scripts/seed_tests.py).")
            return None
        print('Spelling tests:')
        for i, test in enumerate(tests, 1):
            print(f"  {i}. {test['name']} ({len(test['words'])} words)")
        while True:
            choice = input('Pick a test number: ').strip()
            if choice.lower() == 'exit':
                return None
            if choice.isdigit() and 1 <= int(choice) <= len(tests):
                return tests[int(choice) - 1]
            print('Please enter a number from the list.')

    def save_with_retry(self, outcome: dict):
        while outcome.get('save_error'):
            print(f"\n{outcome['save_error']}")
            if input('Try saving again? [y/n] ').strip().lower() != 'y':
                return
            outcome = self.client.retry_save()
        print('Progress saved.')

    def run(self):
        """Run the main practice loop."""
        # Check server connection
        try:
            health = self.client.health_check()
            print(f"Connected to spellplay server ({health['service']})")
        except requests.RequestException:
            print(f"Error: Cannot connect to server at {self.client.base_url}")
            print("Make sure the server is running: python run_server.py")
            return

        self.print_progress(self.client.get_progress())

        if self.test_id:
            test = self.client.get_test(self.test_id)
        else:
            test = self.choose_test()
        if test is None:
            return

        self.print_word_review(test)
        input('Press Enter when you are ready to start...')
        state = self.client.start_practice(test['id'])
        print('Commands: "say" to hear the word, "help" to use a help coin, '
              '"status" for progress, "exit" to quit\n')

        while state['current_word']:
            word = state['current_word']
            print(f"\n{state['progress_text']}")
            print(f"Spell the word ({word['length']} letters)")

            revealed = ''
            answer = ''
            while not answer:
                user_input = input('==> ').strip()

                if user_input.lower() == 'exit':
                    print('Goodbye!')
                    return

                elif user_input.lower() == 'say':
                    print(f">>> {word['text']}")

                elif user_input.lower() == 'help':
                    help_result = self.client.use_help(revealed)
                    if help_result['revealed'] == revealed:
                        print('No help coins left.' if help_result['help_coins'] == 0
                              else 'Nothing more to reveal.')
                    else:
                        revealed = help_result['revealed']
                        print(f"Hint: {revealed}... ({help_result['help_coins']} coins left)")

                elif user_input.lower() == 'status':
                    self.print_status(self.client.get_state())

                elif user_input:
                    answer = user_input

            result = self.client.submit_answer(word['id'], answer)
            self.print_answer(result)
            state = result['state']

        outcome = self.client.complete_practice()
        self.print_completion(outcome)
        self.save_with_retry(outcome)
