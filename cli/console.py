"""Console UI for playing rounds against the mindgym server."""

import random
import time

import requests

from engine.evaluators import score_guess, CORRECT, PRESENT
from engine.generators import scramble_word
from cli.api_client import MindgymAPIClient

# Games whose answers can be typed
CONSOLE_GAMES = [
    'mental_arithmetic',
    'mental_language_discrimination',
    'stroop_clash',
    'word_unscramble',
    'wordle',
    'memory_matrix',
    'odd_one_out',
]

MARK_SYMBOLS = {CORRECT: '[{}]', PRESENT: '({})'}


class ExitRequested(Exception):
    pass


def read(prompt: str = '==> ') -> str:
    value = input(prompt).strip()
    if value.lower() == 'exit':
        raise ExitRequested()
    return value


def format_guess(guess: str, marks: list[str]) -> str:
    """[X] correct, (X) present, X absent."""
    return ' '.join(MARK_SYMBOLS.get(m, ' {} ').format(letter) for letter, m in zip(guess, marks))


class ConsoleUI:
    """Console user interface for mindgym rounds."""

    def __init__(self, client: MindgymAPIClient):
        self.client = client

    def choose(self, options: list) -> str:
        for i, option in enumerate(options, 1):
            print(f'  {i}. {option}')
        while True:
            value = read()
            if value.isdigit() and 1 <= int(value) <= len(options):
                return options[int(value) - 1]
            print(f'Pick a number from 1 to {len(options)}')

    def play_arithmetic(self, content: dict) -> dict:
        print(f"\n  {content['left']} {content['operator']} {content['right']} = ?")
        return {'choice': self.choose(content['options'])}

    def play_language(self, content: dict) -> dict:
        before, after = content['sentenceParts']
        print(f'\n  {before}____{after}')
        return {'choice': self.choose(content['options'])}

    def play_stroop(self, content: dict) -> dict:
        prompt = 'ink colour' if content['task'] == 'INK' else 'word'
        print(f"\n  Word: {content['word']}   Ink: {content['ink']}")
        print(f'  Pick the {prompt}:')
        return {'choice': self.choose(content['options'])}

    def play_unscramble(self, content: dict) -> dict:
        scrambled = content.get('scrambled') or scramble_word(content['word'], random.Random())
        print(f'\n  Unscramble: {scrambled}')
        if content.get('hint'):
            print(f"  Hint: {content['hint']}")
        attempts = []
        while True:
            attempt = read().upper()
            if not attempt:
                continue
            if attempt == 'GIVE UP':
                return {'attempts': attempts}
            attempts.append(attempt)
            if attempt == content['word'].upper():
                return {'attempts': attempts}
            print('Not quite. Type "give up" to move on.')

    def play_wordle(self, content: dict) -> dict:
        word = content['word'].upper()
        print(f"\n  Guess the {len(word)} letter word in {content['max_guesses']} tries")
        guesses = []
        while len(guesses) < content['max_guesses']:
            guess = read(f'{len(guesses) + 1}/{content["max_guesses"]} ==> ').upper()
            if len(guess) != len(word) or not guess.isalpha():
                print(f'Enter {len(word)} letters')
                continue
            guesses.append(guess)
            print('  ' + format_guess(guess, score_guess(word, guess)))
            if guess == word:
                break
        return {'guesses': guesses}

    def play_memory_matrix(self, content: dict) -> dict:
        rows, cols = content['grid_size']['rows'], content['grid_size']['cols']
        targets = {(c['row'], c['col']) for c in content['targets']}
        print()
        for r in range(rows):
            print('  ' + ' '.join('#' if (r, c) in targets else '.' for c in range(cols)))
        input(f"\nMemorize, then press Enter ({content['display_time_ms'] / 1000:.1f}s suggested)")
        print('\n' * 40)
        print(f"Enter {content['target_count']} cells as row,col separated by spaces (0-based)")
        while True:
            try:
                cells = [[int(n) for n in part.split(',')] for part in read().split()]
            except ValueError:
                print('Use row,col pairs like 0,1 2,2')
                continue
            if len(cells) == content['target_count']:
                return {'selected': cells}
            print(f"Need exactly {content['target_count']} cells")

    def play_odd_one_out(self, content: dict) -> dict:
        rows, cols = content['rows'], content['cols']
        print()
        for r in range(rows):
            cells = []
            for c in range(cols):
                index = r * cols + c
                cells.append(content['target'] if index == content['target_index'] else content['distractor'])
            print('  ' + ' '.join(cells))
        print('Enter the odd one as row,col (0-based)')
        while True:
            try:
                r, c = [int(n) for n in read().split(',')]
            except ValueError:
                print('Use row,col like 1,2')
                continue
            return {'index': r * cols + c}

    def play_question(self, game_id: str, content: dict) -> dict:
        players = {
            'mental_arithmetic': self.play_arithmetic,
            'mental_language_discrimination': self.play_language,
            'stroop_clash': self.play_stroop,
            'word_unscramble': self.play_unscramble,
            'wordle': self.play_wordle,
            'memory_matrix': self.play_memory_matrix,
            'odd_one_out': self.play_odd_one_out,
        }
        return players[game_id](content)

    def print_result(self, result: dict):
        print('-' * 40)
        print(f"Score: {result['score']}")
        state = result['state']
        print(f"Correct: {state['correct_count']}/{state['total_questions']}")
        print(f"Time: {state['duration_ms'] / 1000:.1f}s")
        if result.get('persistence_error'):
            print(f"Warning: result not saved ({result['persistence_error']})")
        print('-' * 40)

    def play_round(self, game_id: str):
        data = self.client.start_round(game_id)
        questions = data['questions']
        print(f"\n{game_id}: {len(questions)} questions at rating {data['difficulty_rating_used']:.1f}")

        for i, question in enumerate(questions, 1):
            print(f'\nQuestion {i}/{len(questions)}')
            start = time.monotonic()
            response = self.play_question(game_id, question['content'])
            elapsed_ms = (time.monotonic() - start) * 1000
            answer = self.client.submit_answer(response, elapsed_ms)
            print('Correct!' if answer['is_correct'] else f"Accuracy: {answer['accuracy']:.2f}")

        self.print_result(self.client.end_round())
        self.print_history(game_id)

    def print_history(self, game_id: str):
        sessions = self.client.get_sessions(game_id=game_id, limit=5)
        if sessions:
            print('Recent scores: ' + ', '.join(str(s['score']) for s in sessions))

    def playable_games(self) -> list[str]:
        """Games the server offers that can be played from the console."""
        offered = {g['id'] for g in self.client.list_games()}
        return [g for g in CONSOLE_GAMES if g in offered]

    def run(self, game_id: str = None):
        """Run the main application loop."""
        # Check server connection
        try:
            health = self.client.health_check()
            games = self.playable_games()
            print(f"Connected to mindgym server ({health['storage']})")
        except Exception:
            print(f"Error: Cannot connect to server at {self.client.base_url}")
            print("Make sure the server is running: python run_server.py")
            return

        print('Type "exit" at any prompt to quit\n')
        try:
            while True:
                if game_id is None:
                    print('Pick a game:')
                    chosen = self.choose(games)
                else:
                    chosen = game_id
                try:
                    self.play_round(chosen)
                except requests.RequestException as e:
                    print(f"Error playing round: {e}")
                if game_id is not None:
                    return
        except ExitRequested:
            self.client.reset_round()
            print('Goodbye!')
