"""
engine.py
Implements the GameEngine class, the state machine for one round of non-transitive dice between a human and the house.
Related modules:
- config.py: GameConfig is used to configure the engine.
- state.py: RoundState holds the mutable round data.
- choices.py: Every prompt answer is a Choice (value, help or exit).
- fairness.py: One FairRandomGenerator per randomness point.
- probability.py: Matrix computed once per round, shown on help requests.
- rules.py: Face index and showdown helpers.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from .config import GameConfig
from .dice import DiceSet
from .choices import Choice, HelpRequest, ExitRequest, parse_choice, menu_tokens, EXIT_TOKEN, HELP_TOKEN
from .fairness import FairRandomGenerator, RandomSource, ProtocolViolationError, Reveal, verify_commitment
from .probability import ProbabilityMatrix, probability_matrix
from .rules import face_index, resolve_winner
from ..agents import choose_agent
from .state import (
    RoundState, Throw,
    DETERMINE_FIRST_MOVE, CHOOSE_DICE, HOUSE_THROW, PLAYER_THROW, RESOLVE, ENDED, ABORTED,
    HOUSE, PLAYER,
)

logger = logging.getLogger(__name__)

INPUT_PROMPT = "Your selection: "


class IllegalMoveError(Exception):
    """
    Raised when the engine is driven out of order or a dice index is not selectable.
    """
    pass


@dataclass(frozen=True)
class RoundContext:
    """
    Immutable per-round context passed into every transition.
    Fields:
        dice_set (DiceSet): The validated dice.
        matrix (ProbabilityMatrix): Pairwise win probabilities, computed once.
        config (GameConfig): Rule constraints.
    """
    dice_set: DiceSet
    matrix: ProbabilityMatrix
    config: GameConfig


def plain_help(matrix: ProbabilityMatrix, dice_set: DiceSet, output: Callable[[str], None]) -> None:
    """Fallback help renderer: one line of probabilities per dice."""
    output("Probability of the win for the user:")
    for i, row in enumerate(matrix):
        output(f"{dice_set[i]}: " + " ".join(f"{p:.4f}" for p in row))


class GameEngine:
    """
    Drives one round: first-move determination, dice selection, house throw, player throw, showdown.
    All input goes through read_line, all output through output, so a round can be scripted end to end.
    """
    def __init__(self,
                 dice_set: DiceSet,
                 config: Optional[GameConfig] = None,
                 read_line: Callable[[str], str] = input,
                 output: Callable[[str], None] = print,
                 render_help: Optional[Callable[[ProbabilityMatrix, DiceSet], None]] = None,
                 source: Optional[RandomSource] = None,
                 agent=None):
        """
        Args:
            dice_set (DiceSet): Validated dice for the session.
            config (GameConfig, optional): Rule constraints.
            read_line (callable): Returns the next input line given a prompt string.
            output (callable): Receives each line of output.
            render_help (callable, optional): Renders the probability matrix; defaults to plain_help.
            source (RandomSource, optional): Secure randomness; tests pass a scripted source.
            agent (HouseAgent, optional): House dice selection; defaults to config.house_agent.
        """
        self.config = config or GameConfig()
        self.context = RoundContext(dice_set=dice_set, matrix=probability_matrix(dice_set), config=self.config)
        self.read_line = read_line
        self.output = output
        self.render_help = render_help or (lambda matrix, dice: plain_help(matrix, dice, self.output))
        self.source = source or RandomSource()
        if agent is None:
            agent = choose_agent(self.config.house_agent)
        self.agent = agent
        self.state = RoundState()
        self._events = []
        self._handlers = {
            DETERMINE_FIRST_MOVE: self._determine_first_move,
            CHOOSE_DICE: self._choose_dice,
            HOUSE_THROW: self._house_throw,
            PLAYER_THROW: self._player_throw,
            RESOLVE: self._resolve,
        }

    def _emit(self, event: Dict):
        self._events.append(event)

    def pop_events(self):
        """
        Return and clear all emitted events since last call.
        """
        ev = list(self._events)
        self._events.clear()
        return ev

    def get_events(self):
        """Return all events emitted so far (does not clear)."""
        return list(self._events)

    def play_round(self) -> RoundState:
        """
        Run the round until it ends or the player exits.
        Returns:
            RoundState: Final state; winner is None when aborted.
        Raises:
            ProtocolViolationError: If a reveal does not match its published digest.
            RandomnessSourceError: If the secure random source fails.
        """
        if self.state.phase != DETERMINE_FIRST_MOVE or self._events:
            raise IllegalMoveError("Round already started")
        self._emit({"type": "RoundStarted", "dice": [list(d.faces) for d in self.context.dice_set]})
        while not self.state.is_terminal:
            self._handlers[self.state.phase](self.context)
        return self.state

    # --- prompting -------------------------------------------------------

    def prompt(self, message: str, values: Sequence[int], labels: Optional[Dict[int, str]] = None) -> Choice:
        """
        Show a menu and read lines until a value or exit is chosen.
        Help requests render the matrix and re-prompt; unknown tokens re-prompt with the valid list.
        Returns:
            ValueChoice or ExitRequest.
        """
        labels = labels or {}
        self.output(message)
        for v in values:
            self.output(f"{v} - {labels.get(v, v)}")
        self.output(f"{EXIT_TOKEN} - exit")
        self.output(f"{HELP_TOKEN} - help")
        tokens = menu_tokens(values)
        while True:
            try:
                raw = self.read_line(INPUT_PROMPT)
            except (EOFError, KeyboardInterrupt):
                return ExitRequest()
            choice = parse_choice(raw, values)
            if choice is None:
                self.output(f"Invalid input. Please enter one of the following: {', '.join(tokens)}.")
                continue
            if isinstance(choice, HelpRequest):
                self.render_help(self.context.matrix, self.context.dice_set)
                continue
            return choice

    def _abort(self):
        self.state.phase = ABORTED
        self.state.winner = None
        self._emit({"type": "RoundAborted"})
        self.output("Round aborted. No winner.")

    # --- commit-reveal ---------------------------------------------------

    def _commit(self, purpose: str, bound: int) -> FairRandomGenerator:
        generator = FairRandomGenerator(self.source, self.config)
        commitment = generator.commit(bound)
        self.state.outstanding[purpose] = commitment
        self._emit({"type": "CommitPublished", "purpose": purpose, "bound": commitment.bound, "hmac": commitment.hmac})
        self.output(f"I selected a random value in the range 0..{commitment.bound - 1} (HMAC={commitment.hmac}).")
        return generator

    def _reveal(self, purpose: str, generator: FairRandomGenerator) -> Reveal:
        published = self.state.outstanding.pop(purpose)
        reveal = generator.reveal()
        # counterparty check against the digest published at commit time
        if not verify_commitment(reveal.key, reveal.number, published.hmac):
            logger.error("Reveal for %s does not match published hmac %s", purpose, published.hmac)
            raise ProtocolViolationError(f"Reveal for {purpose} does not match the published HMAC")
        self._emit({"type": "CommitRevealed", "purpose": purpose, "number": reveal.number,
                    "key": reveal.key_hex, "hmac": reveal.hmac})
        return reveal

    # --- phases ----------------------------------------------------------

    def _determine_first_move(self, ctx: RoundContext):
        self.output("Let's determine who makes the first move.")
        generator = self._commit("first_move", 2)
        choice = self.prompt("Try to guess my selection.", [0, 1])
        if isinstance(choice, ExitRequest):
            self._abort()
            return
        reveal = self._reveal("first_move", generator)
        self.output(f"My selection: {reveal.number} (KEY={reveal.key_hex}, HMAC={reveal.hmac}).")
        self.state.player_moves_first = choice.value == reveal.number
        self._emit({"type": "FirstMoveDecided", "guess": choice.value, "number": reveal.number,
                    "player_moves_first": self.state.player_moves_first})
        if self.state.player_moves_first:
            self.output("You make the first move.")
        else:
            index = self._house_pick(ctx, None)
            self.output(f"I make the first move and choose the [{ctx.dice_set[index]}] dice.")
        self.state.phase = CHOOSE_DICE

    def _house_pick(self, ctx: RoundContext, player_index: Optional[int]) -> int:
        available = [i for i in ctx.dice_set.indices() if i != player_index]
        view = {
            "dice_set": ctx.dice_set,
            "matrix": ctx.matrix,
            "available": available,
            "player_dice_index": player_index,
            "config": ctx.config,
        }
        index = self.agent.choose_dice(view)
        if index not in available:
            raise IllegalMoveError(f"House agent chose unavailable dice {index}")
        self.state.house_dice_index = index
        self._emit({"type": "DiceChosen", "party": HOUSE, "index": index})
        return index

    def select_player_dice(self, index: int) -> None:
        """
        Record the player's dice, rejecting the dice the house already announced.
        Raises:
            IllegalMoveError: If the index is out of range or taken by the house.
        """
        if self.state.phase != CHOOSE_DICE:
            raise IllegalMoveError("Not in dice selection phase")
        if index not in self.selectable_dice():
            raise IllegalMoveError(f"Dice {index} is not selectable")
        self.state.player_dice_index = index
        self._emit({"type": "DiceChosen", "party": PLAYER, "index": index})

    def selectable_dice(self):
        taken = self.state.house_dice_index
        return [i for i in self.context.dice_set.indices() if i != taken]

    def _choose_dice(self, ctx: RoundContext):
        values = self.selectable_dice()
        labels = {i: str(ctx.dice_set[i]) for i in values}
        choice = self.prompt("Choose your dice:", values, labels)
        if isinstance(choice, ExitRequest):
            self._abort()
            return
        self.select_player_dice(choice.value)
        self.output(f"You choose the [{ctx.dice_set[choice.value]}] dice.")
        if self.state.house_dice_index is None:
            index = self._house_pick(ctx, choice.value)
            self.output(f"I choose the [{ctx.dice_set[index]}] dice.")
        self.state.phase = HOUSE_THROW

    def _throw(self, ctx: RoundContext, party: str, dice_index: int) -> Optional[Throw]:
        faces = ctx.config.faces_per_dice
        purpose = f"{party}_throw"
        generator = self._commit(purpose, faces)
        choice = self.prompt(f"Add your number modulo {faces}.", list(range(faces)))
        if isinstance(choice, ExitRequest):
            self._abort()
            return None
        reveal = self._reveal(purpose, generator)
        self.output(f"My number is {reveal.number} (KEY={reveal.key_hex}, HMAC={reveal.hmac}).")
        index = face_index(reveal.number, choice.value, faces)
        self.output(f"The result is {reveal.number} + {choice.value} = {index} (mod {faces}).")
        throw = Throw(committed=reveal.number, supplied=choice.value, face_index=index,
                      value=ctx.dice_set[dice_index].face(index))
        self.state.throws[party] = throw
        self._emit({"type": "ThrowResolved", "party": party, "committed": throw.committed,
                    "supplied": throw.supplied, "face_index": throw.face_index, "value": throw.value})
        return throw

    def _house_throw(self, ctx: RoundContext):
        self.output("It's time for my throw.")
        throw = self._throw(ctx, HOUSE, self.state.house_dice_index)
        if throw is None:
            return
        self.output(f"My throw is {throw.value}.")
        self.state.phase = PLAYER_THROW

    def _player_throw(self, ctx: RoundContext):
        self.output("It's time for your throw.")
        throw = self._throw(ctx, PLAYER, self.state.player_dice_index)
        if throw is None:
            return
        self.output(f"Your throw is {throw.value}.")
        self.state.phase = RESOLVE

    def _resolve(self, ctx: RoundContext):
        player_value = self.state.throws[PLAYER].value
        house_value = self.state.throws[HOUSE].value
        winner = resolve_winner(player_value, house_value)
        self.state.winner = winner
        self.state.phase = ENDED
        if winner == PLAYER:
            self.output(f"You win ({player_value} > {house_value})!")
        else:
            self.output(f"I win ({house_value} >= {player_value})!")
        self._emit({"type": "RoundEnded", "winner": winner, "player_value": player_value, "house_value": house_value})
