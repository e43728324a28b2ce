"""Gemini-backed content source.

Asks the model for word-game questions. Nothing the model returns is
trusted: items are shaped into content payloads here and validated by the
round loader like any other source.
"""

import ast
import logging
import random
import time
import google.generativeai as genai

from engine.config import MAX_DIFFICULTY
from engine.content import GameType
from engine.generators import scramble_word
from engine.interfaces import ContentSource
from engine.utils import difficulty_to_tier

logger = logging.getLogger(__name__)

SUPPORTED_GAMES = (GameType.MENTAL_LANGUAGE_DISCRIMINATION, GameType.WORD_UNSCRAMBLE)


class GeminiContentSource(ContentSource):
    """Gemini content source for the language games.

    Every request is a single stateless prompt; no chat history is kept
    between fetches.
    """

    def __init__(self, api_key: str, model_name: str = 'gemini-2.0-flash', difficulty: int = 5,
                 rng: random.Random = None):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)
        self.model_name = model_name
        # Used only when the caller does not pass a difficulty
        self.difficulty = difficulty
        self.rng = rng or random.Random()

    def _execute_prompt(self, prompt: str) -> tuple[str, int]:
        start_time = time.time()
        response = self.model.generate_content(prompt)
        end_time = time.time()
        ms = int((end_time - start_time) * 1000)
        return (response.text, ms)

    def _parse_list(self, response: str) -> list:
        s = response[response.find('['):response.rfind(']')+1]
        s = s.replace('true', 'True').replace('false', 'False').replace('null', 'None')
        try:
            items = ast.literal_eval(s)
        except (SyntaxError, ValueError) as e:
            logger.error(f"Failed to parse questions: {e}")
            logger.error(f"Raw response:\n{response}")
            return []
        if not isinstance(items, list):
            logger.warning(f"Questions response is not a list: {type(items)}")
            return []
        return [item for item in items if isinstance(item, dict)]

    def _language_prompt(self, count: int, difficulty: int) -> str:
        return f"""
            Write {count} English sentence-completion questions that test commonly
            confused words (homophones, near-homophones, easily mixed-up word pairs).

            Requirements:
            - Difficulty level: {difficulty} out of {MAX_DIFFICULTY}
              Level 1 = everyday homophones (to/too, there/their)
              Level 5 = commonly misused pairs (affect/effect, lose/loose)
              Level 10 = rare or formal distinctions (discrete/discreet, disinterested/uninterested)
            - Each sentence has exactly one blank
            - 2 or 3 options, exactly one of them correct, no duplicates

            Respond with ONLY a Python list of dictionaries in this exact format:
            [
                {{'before': 'She went ', 'after': ' the store.', 'options': ['to', 'too'], 'answer': 'to'}}
            ]

            Return ONLY the list, no other text, no markdown formatting.
        """

    def _unscramble_prompt(self, count: int, difficulty: int) -> str:
        return f"""
            Pick {count} English words for a word unscramble game, with a short hint for each.

            Requirements:
            - Difficulty level: {difficulty} out of {MAX_DIFFICULTY}
              Level 1 = common 4 letter words, Level 10 = less common 8 letter words
            - Letters only, no spaces or hyphens
            - The hint must not contain the word

            Respond with ONLY a Python list of dictionaries in this exact format:
            [
                {{'word': 'BRAIN', 'hint': 'Thinking organ'}}
            ]

            Return ONLY the list, no other text, no markdown formatting.
        """

    def generate_questions(self, game_id: str, count: int, difficulty: int) -> list[dict]:
        """Ask the model for count questions. Returns {id, content, difficulty} items."""
        if game_id == GameType.MENTAL_LANGUAGE_DISCRIMINATION:
            response, ms = self._execute_prompt(self._language_prompt(count, difficulty))
            contents = [{
                'type': game_id,
                'sentenceParts': [item.get('before', ''), item.get('after', '')],
                'options': item.get('options'),
                'answer': item.get('answer'),
                'difficulty': difficulty,
            } for item in self._parse_list(response)]
        elif game_id == GameType.WORD_UNSCRAMBLE:
            response, ms = self._execute_prompt(self._unscramble_prompt(count, difficulty))
            contents = []
            for item in self._parse_list(response):
                word = str(item.get('word', '')).upper()
                contents.append({
                    'type': game_id,
                    'word': word,
                    'hint': item.get('hint'),
                    'scrambled': scramble_word(word, self.rng),
                    'difficulty': difficulty,
                })
        else:
            return []

        logger.info(f"Gemini returned {len(contents)} {game_id} questions in {ms}ms")
        return [{'id': None, 'content': c, 'difficulty': difficulty} for c in contents[:count]]

    def fetch_questions(self, game_id: str, count: int, difficulty: float | None = None) -> list[dict]:
        if game_id not in SUPPORTED_GAMES:
            return []
        tier = difficulty_to_tier(difficulty) if difficulty is not None else self.difficulty
        return self.generate_questions(game_id, count, tier)
