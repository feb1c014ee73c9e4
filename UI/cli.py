import argparse
import datetime
import hashlib
import logging
import os
import sys
from typing import List, Optional, Tuple

from tabulate import tabulate

from nontransitive_dice.core.config import GameConfig
from nontransitive_dice.core.dice import DiceSet, parse_dice_sets
from nontransitive_dice.core.engine import GameEngine
from nontransitive_dice.core.fairness import ProtocolViolationError, RandomnessSourceError
from nontransitive_dice.core.probability import ProbabilityMatrix
from nontransitive_dice.agents import AGENT_MAP, choose_agent
from nontransitive_dice.persistence import csv_io
from nontransitive_dice.persistence.events import GameEvent
from nontransitive_dice.persistence.recorder import InMemoryRecorder, verify_transcript

PROG = "nontransitive-dice"
USAGE = (
    f"Usage: {PROG} <dice1> <dice2> <dice3> ...\n"
    f"Example: {PROG} 2,2,4,4,9,9 6,8,1,1,8,6 7,5,3,7,5,3"
)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_RANDOMNESS = 2
EXIT_PROTOCOL = 3

# flags that take a value; everything that is not a flag is a dice definition
_VALUE_FLAGS = ("--house", "--transcript", "--verify")
_BARE_FLAGS = ("-v", "--verbose", "-h", "--help")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Play non-transitive dice against the house with provably fair throws.",
        epilog=USAGE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--house", type=str, default=None,
                        help=f"House dice-selection strategy ({', '.join(sorted(AGENT_MAP))})")
    parser.add_argument("--transcript", type=str, default=None,
                        help="Append the round transcript (digests, keys, numbers) to this CSV file")
    parser.add_argument("--verify", type=str, default=None,
                        help="Re-check every reveal in a saved transcript CSV and exit")
    return parser


def split_argv(argv: List[str]) -> Tuple[List[str], List[str]]:
    """
    Separate option flags from dice definitions.
    Dice may start with '-' (negative faces), so argparse never sees them.
    """
    flags, dice = [], []
    i = 0
    while i < len(argv):
        token = argv[i]
        if token in _BARE_FLAGS or ("=" in token and token.split("=", 1)[0] in _VALUE_FLAGS):
            flags.append(token)
        elif token in _VALUE_FLAGS:
            flags.extend(argv[i:i + 2])
            i += 1
        elif token == "--":
            dice.extend(argv[i + 1:])
            break
        else:
            dice.append(token)
        i += 1
    return flags, dice


def render_probability_table(matrix: ProbabilityMatrix, dice_set: DiceSet) -> str:
    """
    Render the win probability matrix as an (n+1) x (n+1) grid.
    Rows are the user's dice, columns the house dice; diagonal cells are marked as self-comparison.
    """
    headers = ["User dice v"] + [str(d) for d in dice_set]
    rows = []
    for i, row in enumerate(matrix):
        cells = [str(dice_set[i])]
        for j, p in enumerate(row):
            cells.append(f"- ({p:.4f})" if i == j else f"{p:.4f}")
        rows.append(cells)
    return tabulate(rows, headers=headers, tablefmt="grid", disable_numparse=True)


def show_probability_table(matrix: ProbabilityMatrix, dice_set: DiceSet):
    print("Probability of the win for the user:")
    print(render_probability_table(matrix, dice_set))


def usage_error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    print(USAGE, file=sys.stderr)
    return EXIT_USAGE


def verify_file(path: str) -> int:
    """
    Re-check a transcript written with --transcript.
    """
    if not os.path.exists(path):
        return usage_error(f"Transcript not found: {path}")
    try:
        events = csv_io.read_transcript(path)
    except (KeyError, ValueError) as e:
        print(f"Fairness check FAILED: unreadable transcript ({e})")
        return EXIT_PROTOCOL
    problems = verify_transcript(events)
    reveals = sum(1 for ev in events if ev.event_type == "CommitRevealed")
    if problems:
        print("Fairness check FAILED:")
        for p in problems:
            print(f"  {p}")
        return EXIT_PROTOCOL
    print(f"All {reveals} revealed values match their published HMACs.")
    return EXIT_OK


def record_round(engine: GameEngine, agent_name: str, transcript_path: Optional[str]) -> InMemoryRecorder:
    """
    Wrap the engine's events in GameEvents and optionally append them to a transcript CSV.
    """
    timestamp = datetime.datetime.now(datetime.timezone.utc).isoformat()
    raw_id = f"cli_{timestamp}_{os.getpid()}_{agent_name}"
    game_id = hashlib.sha256(raw_id.encode()).hexdigest()[:16]
    recorder = InMemoryRecorder()
    for ev in engine.get_events():
        party = ev.get("party")
        player_type = {"player": "Human", "house": type(engine.agent).__name__}.get(party)
        recorder.record(GameEvent.from_engine(game_id, ev, player_type))
    if transcript_path:
        rows = csv_io.transcript_rows(recorder.events(), timestamp)
        csv_io.append_rows_to_csv(rows, transcript_path, csv_io.get_transcript_header())
        print(f"[Round transcript saved to {transcript_path}]")
    return recorder


def main(argv: Optional[List[str]] = None, read_line=input) -> int:
    """
    Parse dice from the command line and play one round.
    Returns:
        int: Process exit status (0 played or aborted, 1 usage, 2 randomness failure, 3 fairness failure).
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    flags, definitions = split_argv(argv)
    try:
        args = build_parser().parse_args(flags)
    except SystemExit as e:
        # argparse has already printed help or the error
        return EXIT_OK if e.code == 0 else EXIT_USAGE
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if args.verify:
        return verify_file(args.verify)

    config = GameConfig() if args.house is None else GameConfig(house_agent=args.house)
    try:
        dice_set = parse_dice_sets(definitions, config)
        agent = choose_agent(config.house_agent)
    except ValueError as e:
        return usage_error(str(e))

    engine = GameEngine(dice_set, config=config, read_line=read_line, output=print,
                        render_help=show_probability_table, agent=agent)
    try:
        engine.play_round()
    except RandomnessSourceError as e:
        print(f"Fatal: {e}", file=sys.stderr)
        return EXIT_RANDOMNESS
    except ProtocolViolationError as e:
        print(f"Fairness check failed, the round is void: {e}", file=sys.stderr)
        return EXIT_PROTOCOL

    recorder = record_round(engine, config.house_agent, args.transcript)
    problems = verify_transcript(recorder.events())
    if problems:
        for p in problems:
            print(f"Fairness check failed: {p}", file=sys.stderr)
        return EXIT_PROTOCOL
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
