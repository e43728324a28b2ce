"""API tests for the mindgym server, run against file storage."""

import os
import tempfile
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from engine.scoring import calculate_bpi
from server.app import app


class TestServer(unittest.TestCase):
    """Round flow through the HTTP API."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        # HOME points at the temp dir so no local config file supplies a Gemini key
        self.env = patch.dict(os.environ, {
            'MINDGYM_STORAGE': 'file',
            'MINDGYM_STATE_DIR': self.tmp.name,
            'HOME': self.tmp.name,
        })
        self.env.start()
        os.environ.pop('GEMINI_API_KEY', None)
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        self.env.stop()
        self.tmp.cleanup()

    def start(self, game_id='memory_matrix', **extra):
        response = self.client.post('/api/rounds/start', json={'game_id': game_id, **extra})
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()

    def test_health(self):
        response = self.client.get('/api/health')
        self.assertEqual(response.json(), {'status': 'ok', 'storage': 'FileStorage'})

    def test_list_games(self):
        games = {g['id']: g for g in self.client.get('/api/games').json()['games']}
        self.assertEqual(len(games), 9)
        self.assertEqual(games['mental_arithmetic']['target_time_ms'], 6000)
        self.assertIsNone(games['wordle']['target_time_ms'])

    def test_generate(self):
        response = self.client.post('/api/games/ball_sort/generate',
                                    json={'difficulty': 4, 'count': 2, 'seed': 'api'})
        items = response.json()['items']
        self.assertEqual(len(items), 2)
        self.assertEqual(items[0]['colorCount'], 4)

        unknown = self.client.post('/api/games/chess/generate', json={})
        self.assertEqual(unknown.status_code, 404)

    def test_validate(self):
        response = self.client.post('/api/content/validate', json={'content': {'type': 'wordle', 'word': 'CRANE'}})
        body = response.json()
        self.assertFalse(body['valid'])
        self.assertTrue(body['errors'])

        response = self.client.post('/api/content/validate',
                                    json={'content': {'type': 'wordle', 'word': 'CRANE', 'max_guesses': 6}})
        self.assertTrue(response.json()['valid'])

    def test_score(self):
        response = self.client.post('/api/score', json={'accuracy': 0.75, 'difficulty': 6})
        self.assertEqual(response.json()['score'], calculate_bpi(0.75, 6))

    def test_evaluate(self):
        content = {'type': 'word_unscramble', 'word': 'BRAIN'}
        response = self.client.post('/api/evaluate',
                                    json={'content': content, 'response': {'attempts': ['BRIAN', 'BRAIN']}})
        self.assertAlmostEqual(response.json()['accuracy'], 0.9)

        bad = self.client.post('/api/evaluate', json={'content': content, 'response': {'guesses': []}})
        self.assertEqual(bad.status_code, 422)

    def test_full_round(self):
        data = self.start(count=3)
        self.assertEqual(data['difficulty_rating_used'], 1)
        self.assertEqual(data['state']['phase'], 'playing')
        questions = data['questions']
        self.assertEqual(len(questions), 3)

        for i, question in enumerate(questions):
            response = self.client.post('/api/rounds/answer', json={
                'response': {'selected': question['content']['targets']},
                'response_time_ms': 1200,
            })
            self.assertEqual(response.status_code, 200, response.text)
            body = response.json()
            self.assertTrue(body['is_correct'])
            self.assertEqual(body['remaining'], 2 - i)

        extra = self.client.post('/api/rounds/answer', json={
            'response': {'selected': []}, 'response_time_ms': 10,
        })
        self.assertEqual(extra.status_code, 409)

        result = self.client.post('/api/rounds/end', json={}).json()
        self.assertEqual(result['score'], calculate_bpi(1.0, 1))
        self.assertEqual(result['state']['correct_count'], 3)
        self.assertIsNotNone(result['session_id'])
        self.assertIsNone(result['persistence_error'])

        sessions = self.client.get('/api/sessions').json()['sessions']
        self.assertEqual(len(sessions), 1)
        self.assertEqual(sessions[0]['score'], result['score'])

    def test_rating_drives_generation(self):
        response = self.client.put('/api/ratings/default/odd_one_out', params={'rating': 7})
        self.assertEqual(response.status_code, 200)
        data = self.start('odd_one_out')
        self.assertEqual(data['difficulty_rating_used'], 7)
        self.assertEqual(data['questions'][0]['content']['difficulty'], 7)

        bad = self.client.put('/api/ratings/default/odd_one_out', params={'rating': 11})
        self.assertEqual(bad.status_code, 422)

    def test_invalid_response(self):
        self.start()
        response = self.client.post('/api/rounds/answer', json={
            'response': {'selected': [[0, 0]]}, 'response_time_ms': 100,
        })
        self.assertEqual(response.status_code, 422)
        state = self.client.get('/api/rounds/state').json()
        self.assertEqual(state['answered'], 0)

    def test_out_of_order(self):
        answer = self.client.post('/api/rounds/answer', json={'response': {}, 'response_time_ms': 1})
        self.assertEqual(answer.status_code, 409)
        end = self.client.post('/api/rounds/end', json={})
        self.assertEqual(end.status_code, 409)

    def test_reset(self):
        self.start()
        response = self.client.post('/api/rounds/reset', json={})
        self.assertEqual(response.json()['state']['phase'], 'idle')
        self.assertEqual(self.client.post('/api/rounds/end', json={}).status_code, 409)

    def test_unknown_game(self):
        response = self.client.post('/api/rounds/start', json={'game_id': 'chess'})
        self.assertEqual(response.status_code, 404)

    def test_rounds_are_per_user(self):
        self.start(user_id='alice')
        state = self.client.get('/api/rounds/state', params={'user_id': 'bob'}).json()
        self.assertEqual(state['state']['phase'], 'idle')


if __name__ == '__main__':
    unittest.main()
