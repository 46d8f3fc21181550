"""Tests for single-pass game sessions."""

import unittest
from datetime import datetime, timedelta

from spellplay.models import Word
from spellplay.errors import ValidationError, InvariantViolation
from spellplay.games import GameSession, GamePhase
from spellplay.results import GameResult


START = datetime(2026, 3, 2, 9, 0, 0)


class TestGameSession(unittest.TestCase):

    def setUp(self):
        self.words = [Word('cat', display_order=0), Word('dog', display_order=1)]
        self.game = GameSession().setup(self.words)

    def test_initial_state(self):
        self.assertEqual(self.game.phase, GamePhase.READY)
        self.assertEqual(self.game.target_text, 'cat')
        self.assertEqual(self.game.progress, 0.0)

    def test_empty_words_rejected(self):
        with self.assertRaises(ValidationError):
            GameSession().setup([])

    def test_fast_clean_word(self):
        self.game.start_word_timer(START)
        self.assertEqual(self.game.phase, GamePhase.PLAYING)
        points, stars = self.game.handle_correct_answer(START + timedelta(seconds=2))
        self.assertEqual((points, stars), (15, 3))
        self.assertEqual(self.game.phase, GamePhase.WORD_COMPLETE)

    def test_mistake_resets_combo_and_lowers_stars(self):
        self.game.start_word_timer(START)
        self.game.handle_correct_answer(START + timedelta(seconds=10))
        self.game.advance_to_next_word()

        self.game.start_word_timer(START)
        self.assertFalse(self.game.submit('dgo', START + timedelta(seconds=1)))
        self.assertEqual(self.game.combo_count, 0)
        self.assertEqual(self.game.combo_multiplier, 1)
        self.assertEqual(self.game.mistakes_this_word, 1)
        self.assertTrue(self.game.submit('DOG', START + timedelta(seconds=2)))
        self.assertEqual(self.game.total_stars, 2 + 1)

    def test_combo_multiplies_points(self):
        self.game.start_word_timer(START)
        self.game.handle_correct_answer(START + timedelta(seconds=10))
        self.game.advance_to_next_word()
        self.game.start_word_timer(START)
        points, _ = self.game.handle_correct_answer(START + timedelta(seconds=10))
        self.assertEqual(points, 20)
        self.assertEqual(self.game.score, 30)

    def test_finish(self):
        for word in self.words:
            self.game.start_word_timer(START)
            self.game.submit(word.text, START + timedelta(seconds=10))
            self.game.advance_to_next_word()
        self.assertTrue(self.game.is_complete)
        self.assertEqual(self.game.phase, GamePhase.GAME_COMPLETE)
        self.assertEqual(self.game.finish(), GameResult(30, 4, 2, 0))
        with self.assertRaises(InvariantViolation):
            self.game.handle_correct_answer(START)

    def test_reset(self):
        self.game.start_word_timer(START)
        self.game.handle_correct_answer(START)
        self.game.reset()
        self.assertEqual(self.game.score, 0)
        self.assertEqual(self.game.current_index, 0)
        self.assertEqual(self.game.phase, GamePhase.READY)


if __name__ == '__main__':
    unittest.main()
