"""Unit tests for the console client."""

import unittest
from unittest.mock import MagicMock, patch

from cli.api_client import MindgymAPIClient
from cli.console import ConsoleUI


# ============================================================================
# Test Cases
# ============================================================================

class TestConsoleUI(unittest.TestCase):
    """Console flow against a mocked API client."""

    def setUp(self):
        self.client = MagicMock()
        self.client.base_url = 'http://localhost:8000'
        self.client.list_games.return_value = [
            {'id': 'ball_sort'}, {'id': 'wordle'}, {'id': 'mental_arithmetic'},
        ]
        self.ui = ConsoleUI(self.client)

    def test_playable_games_follow_server(self):
        self.assertEqual(self.ui.playable_games(), ['mental_arithmetic', 'wordle'])

    def test_menu_lists_playable_games(self):
        self.client.health_check.return_value = {'storage': 'FileStorage'}
        with patch('builtins.input', side_effect=['exit']), patch('builtins.print') as mock_print:
            self.ui.run()
        mock_print.assert_any_call('  1. mental_arithmetic')
        mock_print.assert_any_call('  2. wordle')
        self.client.reset_round.assert_called_once()

    def test_round_shows_recent_scores(self):
        self.client.start_round.return_value = {
            'difficulty_rating_used': 1.0,
            'questions': [{'id': None, 'difficulty': 1, 'content': {
                'type': 'mental_arithmetic', 'left': 2, 'right': 3, 'operator': '+',
                'answer': 5, 'options': [5, 6],
            }}],
        }
        self.client.submit_answer.return_value = {'is_correct': True, 'accuracy': 1.0}
        self.client.end_round.return_value = {
            'score': 300,
            'state': {'correct_count': 1, 'total_questions': 1, 'duration_ms': 1500},
            'persistence_error': None,
        }
        self.client.get_sessions.return_value = [{'score': 300}, {'score': 250}]

        with patch('builtins.input', side_effect=['1']), patch('builtins.print') as mock_print:
            self.ui.play_round('mental_arithmetic')

        self.assertEqual(self.client.submit_answer.call_args.args[0], {'choice': 5})
        self.client.get_sessions.assert_called_once_with(game_id='mental_arithmetic', limit=5)
        mock_print.assert_any_call('Recent scores: 300, 250')


class TestMindgymAPIClient(unittest.TestCase):
    """Requests carry the user id and unwrap the payload."""

    def setUp(self):
        self.api = MindgymAPIClient('http://localhost:8000/', user_id='alice')
        self.response = MagicMock()
        patcher = patch.object(self.api.session, 'get', return_value=self.response)
        self.get = patcher.start()
        self.addCleanup(patcher.stop)

    def test_list_games(self):
        self.response.json.return_value = {'games': [{'id': 'wordle'}]}
        self.assertEqual(self.api.list_games(), [{'id': 'wordle'}])
        self.get.assert_called_once_with('http://localhost:8000/api/games', params={'user_id': 'alice'})

    def test_get_sessions(self):
        self.response.json.return_value = {'sessions': [{'score': 700}]}
        self.assertEqual(self.api.get_sessions(game_id='wordle', limit=5), [{'score': 700}])
        self.get.assert_called_once_with(
            'http://localhost:8000/api/sessions',
            params={'limit': 5, 'game_id': 'wordle', 'user_id': 'alice'})


if __name__ == '__main__':
    unittest.main()
