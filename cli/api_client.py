"""REST API client for spellplay server."""

import requests


class SpellPlayAPIClient:
    """Client for communicating with the spellplay REST API."""

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
        response = self.session.get(f"{self.base_url}/")
        response.raise_for_status()
        return response.json()

    def list_tests(self) -> list[dict]:
        return self._get("/api/tests")['tests']

    def get_test(self, test_id: str) -> dict:
        return self._get(f"/api/tests/{test_id}")

    def create_test(self, name: str, words: list[str] | str, help_coins: int = 3) -> dict:
        return self._post("/api/tests", {
            'name': name,
            'words': words,
            'help_coins': help_coins
        })

    def start_practice(self, test_id: str) -> dict:
        """Start practicing a test. Returns the initial practice state."""
        return self._post("/api/practice/start", {'test_id': test_id})

    def get_state(self) -> dict:
        return self._get("/api/practice/state")

    def submit_answer(self, word_id: str, answer: str) -> dict:
        return self._post("/api/practice/answer", {
            'word_id': word_id,
            'answer': answer
        })

    def use_help(self, typed: str = "") -> dict:
        """Spend a help coin. Returns the revealed prefix and coins left."""
        return self._post("/api/practice/help", {'typed': typed})

    def complete_practice(self) -> dict:
        return self._post("/api/practice/complete", {})

    def retry_save(self) -> dict:
        return self._post("/api/practice/retry-save", {})

    def get_progress(self) -> dict:
        return self._get("/api/progress")

    def get_achievements(self) -> list[dict]:
        return self._get("/api/achievements")['achievements']
