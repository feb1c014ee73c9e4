"""
choices.py
Defines the answers a player can give at any prompt: a domain value, a help request or an exit request.
Related modules:
- engine.py: Reads a Choice from the input source at every prompt and dispatches on its type.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

EXIT_TOKEN = "X"
HELP_TOKEN = "?"


class Choice:
    """
    Base class for everything a prompt can return. Subclassed by ValueChoice, HelpRequest and ExitRequest.
    """
    pass


@dataclass(frozen=True)
class ValueChoice(Choice):
    """
    A guess, dice index or added number picked from the prompt's menu.
    Args:
        value (int): The selected value.
    """
    value: int


@dataclass(frozen=True)
class HelpRequest(Choice):
    """
    Asks for the probability table; the prompt is repeated afterwards.
    """
    pass


@dataclass(frozen=True)
class ExitRequest(Choice):
    """
    Abandons the round with no winner.
    """
    pass


def parse_choice(raw: str, values: Sequence[int]) -> Optional[Choice]:
    """
    Map one line of input onto a Choice.
    Args:
        raw (str): Line read from the input source.
        values (list[int]): Domain values valid at this prompt.
    Returns:
        Choice or None: None if the token is not on the menu.
    """
    token = raw.strip()
    if token.upper() == EXIT_TOKEN:
        return ExitRequest()
    if token == HELP_TOKEN:
        return HelpRequest()
    if token.isdecimal() and str(int(token)) == token and int(token) in values:
        return ValueChoice(int(token))
    return None


def menu_tokens(values: Sequence[int]):
    """Valid tokens for a prompt, in display order."""
    return [str(v) for v in values] + [EXIT_TOKEN, HELP_TOKEN]
