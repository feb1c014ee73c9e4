import unittest
from unittest import mock

from nontransitive_dice.core.dice import parse_dice_sets
from nontransitive_dice.core.engine import GameEngine, IllegalMoveError
from nontransitive_dice.core.fairness import ProtocolViolationError
from nontransitive_dice.core.state import ENDED, ABORTED, CHOOSE_DICE, HOUSE, PLAYER
from nontransitive_dice.agents.default_agent import DefaultAgent
from nontransitive_dice.persistence.events import GameEvent
from nontransitive_dice.persistence.recorder import verify_transcript
from scripted import ScriptedSource, ScriptedInput

DICE = ["2,2,4,4,9,9", "6,8,1,1,8,6", "7,5,3,7,5,3"]


def make_engine(numbers, lines, **kwargs):
    out = []
    engine = GameEngine(parse_dice_sets(DICE), read_line=ScriptedInput(lines), output=out.append,
                        source=ScriptedSource(numbers), **kwargs)
    return engine, out


class TestEngineFlow(unittest.TestCase):
    """
    Full rounds driven by scripted input and scripted committed numbers. Throw faces are
    checked against (committed + supplied) mod 6 on the chosen dice.
    """

    def test_player_moves_first_and_house_wins(self):
        # guess=0 matches committed 0; dice=2; house-add=3; player-add=4
        engine, out = make_engine([0, 1, 2], ["0", "2", "3", "4"])
        state = engine.play_round()
        self.assertEqual(state.phase, ENDED)
        self.assertTrue(state.player_moves_first)
        self.assertEqual(state.player_dice_index, 2)
        # counter agent answers dice 2 with dice 1 (20/36 against 16/36)
        self.assertEqual(state.house_dice_index, 1)
        house, player = state.throws[HOUSE], state.throws[PLAYER]
        self.assertEqual((house.committed, house.supplied, house.face_index, house.value), (1, 3, 4, 8))
        self.assertEqual((player.committed, player.supplied, player.face_index, player.value), (2, 4, 0, 7))
        self.assertEqual(state.winner, HOUSE)
        self.assertIn("I win (8 >= 7)!", out)
        self.assertIn("The result is 1 + 3 = 4 (mod 6).", out)
        self.assertEqual(state.outstanding, {})

    def test_house_moves_first_and_announces_default_dice(self):
        # guess=1 misses committed 0; dice 1 is taken by the house and rejected
        engine, out = make_engine([0, 5, 3], ["1", "1", "2", "0", "3"])
        state = engine.play_round()
        self.assertFalse(state.player_moves_first)
        self.assertIn("I make the first move and choose the [6,8,1,1,8,6] dice.", out)
        self.assertIn("Invalid input. Please enter one of the following: 0, 2, X, ?.", out)
        self.assertEqual(state.throws[HOUSE].value, 6)
        self.assertEqual(state.throws[PLAYER].value, 7)
        self.assertEqual(state.winner, PLAYER)
        self.assertIn("You win (7 > 6)!", out)

    def test_tie_goes_to_house(self):
        dice = ["3,3,3,3,3,3", "3,3,3,3,3,3", "1,1,1,1,1,1"]
        out = []
        engine = GameEngine(parse_dice_sets(dice), read_line=ScriptedInput(["0", "0", "0", "0"]),
                            output=out.append, source=ScriptedSource([0, 0, 0]), agent=DefaultAgent())
        state = engine.play_round()
        self.assertEqual(state.winner, HOUSE)
        self.assertIn("I win (3 >= 3)!", out)

    def test_exit_at_first_prompt_aborts_without_reveal(self):
        engine, out = make_engine([1], ["X"])
        state = engine.play_round()
        self.assertEqual(state.phase, ABORTED)
        self.assertIsNone(state.winner)
        types = [e["type"] for e in engine.get_events()]
        self.assertEqual(types, ["RoundStarted", "CommitPublished", "RoundAborted"])
        self.assertIn("first_move", state.outstanding)

    def test_exit_during_throw(self):
        engine, _ = make_engine([0, 1], ["0", "2", "X"])
        state = engine.play_round()
        self.assertEqual(state.phase, ABORTED)
        self.assertEqual(state.throws, {})

    def test_end_of_input_aborts(self):
        engine, _ = make_engine([0], [])
        self.assertEqual(engine.play_round().phase, ABORTED)

    def test_help_renders_matrix_and_reprompts(self):
        calls = []
        engine, out = make_engine([0, 1, 2], ["?", "0", "?", "2", "3", "4"],
                                  render_help=lambda matrix, dice: calls.append(matrix))
        state = engine.play_round()
        self.assertEqual(len(calls), 2)
        self.assertAlmostEqual(calls[0][0][1], 20 / 36)
        self.assertEqual(state.phase, ENDED)

    def test_invalid_input_does_not_change_state(self):
        engine, out = make_engine([0, 1, 2], ["7", "yes", "0", "2", "3", "4"])
        engine.play_round()
        invalid = [line for line in out if line.startswith("Invalid input")]
        self.assertEqual(len(invalid), 2)
        self.assertIn("0, 1, X, ?", invalid[0])

    def test_events_form_a_verifiable_transcript(self):
        engine, _ = make_engine([0, 1, 2], ["0", "2", "3", "4"])
        engine.play_round()
        events = [GameEvent.from_engine("g1", e) for e in engine.get_events()]
        published = [e for e in events if e.event_type == "CommitPublished"]
        revealed = [e for e in events if e.event_type == "CommitRevealed"]
        self.assertEqual(len(published), 3)
        self.assertEqual([e.payload["hmac"] for e in published], [e.payload["hmac"] for e in revealed])
        self.assertEqual([e.payload["bound"] for e in published], [2, 6, 6])
        self.assertEqual(verify_transcript(events), [])
        self.assertEqual(events[-1].event_type, "RoundEnded")

    def test_digest_mismatch_is_fatal(self):
        engine, _ = make_engine([0], ["0"])
        with mock.patch("nontransitive_dice.core.engine.verify_commitment", return_value=False):
            with self.assertRaises(ProtocolViolationError):
                engine.play_round()

    def test_round_cannot_be_replayed(self):
        engine, _ = make_engine([1], ["X"])
        engine.play_round()
        with self.assertRaises(IllegalMoveError):
            engine.play_round()

    def test_player_cannot_take_house_dice(self):
        engine, _ = make_engine([], [])
        engine.state.phase = CHOOSE_DICE
        engine.state.house_dice_index = 1
        with self.assertRaises(IllegalMoveError):
            engine.select_player_dice(1)
        with self.assertRaises(IllegalMoveError):
            engine.select_player_dice(5)
        engine.select_player_dice(0)
        self.assertEqual(engine.state.player_dice_index, 0)


if __name__ == '__main__':
    unittest.main()
