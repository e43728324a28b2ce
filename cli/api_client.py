"""REST API client for the mindgym server."""

import requests


class MindgymAPIClient:
    """Client for communicating with the mindgym REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", user_id: str = "default"):
        self.base_url = base_url.rstrip('/')
        self.user_id = user_id
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        if params is None:
            params = {}
        params['user_id'] = self.user_id
        response = self.session.get(f"{self.base_url}{endpoint}", params=params)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict) -> dict:
        """Make a POST request."""
        data['user_id'] = self.user_id
        response = self.session.post(f"{self.base_url}{endpoint}", json=data)
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        response = self.session.get(f"{self.base_url}/api/health")
        response.raise_for_status()
        return response.json()

    def list_games(self) -> list[dict]:
        return self._get("/api/games")['games']

    def start_round(self, game_id: str, count: int = None, seed: str = None) -> dict:
        """Start a round. Returns {state, difficulty_rating_used, questions}."""
        data = {'game_id': game_id}
        if count is not None:
            data['count'] = count
        if seed is not None:
            data['seed'] = seed
        return self._post("/api/rounds/start", data)

    def submit_answer(self, response: dict, response_time_ms: float) -> dict:
        """Answer the next question of the current round."""
        return self._post("/api/rounds/answer", {
            'response': response,
            'response_time_ms': response_time_ms
        })

    def end_round(self) -> dict:
        return self._post("/api/rounds/end", {})

    def reset_round(self) -> dict:
        return self._post("/api/rounds/reset", {})

    def get_sessions(self, game_id: str = None, limit: int = 10) -> list[dict]:
        """Recent finished sessions for this user."""
        params = {'limit': limit}
        if game_id:
            params['game_id'] = game_id
        return self._get("/api/sessions", params)['sessions']
