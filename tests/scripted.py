"""
Scripted collaborators for driving a round without a terminal or real randomness.
"""
from nontransitive_dice.core.fairness import RandomSource


class ScriptedSource(RandomSource):
    """
    Returns the given committed numbers in order; keys are distinct and deterministic.
    """
    def __init__(self, numbers):
        self.numbers = list(numbers)
        self.keys_issued = 0

    def randbelow(self, bound):
        return self.numbers.pop(0)

    def token_bytes(self, size):
        self.keys_issued += 1
        return bytes([self.keys_issued % 256]) * size


class ScriptedInput:
    """
    Stand-in for input(): returns lines in order and raises EOFError when exhausted.
    """
    def __init__(self, lines):
        self.lines = list(lines)
        self.prompts = []

    def __call__(self, prompt=""):
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)
