"""
Simulate fair throws for every ordered pair of dice, compare observed win rates with the
probability matrix, and save results + a win% chart.
Usage: python scripts/run_tournament.py --trials 2000 --data-dir data -- 2,2,4,4,9,9 6,8,1,1,8,6 7,5,3,7,5,3
"""
import os
import argparse
import itertools
import secrets
from collections import Counter
from typing import Dict, List, Any

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from nontransitive_dice.persistence import csv_io
from nontransitive_dice.core.config import GameConfig
from nontransitive_dice.core.dice import Dice, DiceSet, ValidationError, parse_dice_sets
from nontransitive_dice.core.fairness import FairRandomGenerator, RandomSource
from nontransitive_dice.core.probability import probability_matrix
from nontransitive_dice.core.rules import face_index

DEFAULT_DICE = ["2,2,4,4,9,9", "6,8,1,1,8,6", "7,5,3,7,5,3"]


def fair_face(source: RandomSource, cfg: GameConfig, face_counts: Counter) -> int:
    """One commit-reveal cycle with a random counterparty contribution; returns the face index."""
    generator = FairRandomGenerator(source, cfg)
    generator.commit(cfg.faces_per_dice)
    supplied = secrets.randbelow(cfg.faces_per_dice)
    reveal = generator.reveal()
    index = face_index(reveal.number, supplied, cfg.faces_per_dice)
    face_counts[index] += 1
    return index


def run_pairing(dice_a: Dice, dice_b: Dice, trials: int, source: RandomSource, cfg: GameConfig, face_counts: Counter) -> Dict[str, int]:
    wins_a = wins_b = ties = 0
    for _ in range(trials):
        a = dice_a.face(fair_face(source, cfg, face_counts))
        b = dice_b.face(fair_face(source, cfg, face_counts))
        if a > b:
            wins_a += 1
        elif b > a:
            wins_b += 1
        else:
            ties += 1
    return {"wins_a": wins_a, "wins_b": wins_b, "ties": ties}


def save_win_chart(rows: List[Dict[str, Any]], out_path: str):
    labels = [f"{r['dice_a']}\nvs\n{r['dice_b']}" for r in rows]
    observed = [100.0 * r["observed_a"] for r in rows]
    expected = [100.0 * r["expected_a"] for r in rows]
    width = max(6, len(labels) * 1.2)
    plt.figure(figsize=(width, 5))
    bars = plt.bar(labels, observed, color='C0', label='observed')
    plt.scatter(labels, expected, color='C3', zorder=3, label='expected')
    plt.ylabel('Win percentage of row dice (%)')
    plt.ylim(0, 100)
    plt.title('Fair-throw simulation: win% per ordered pairing')
    for rect, val in zip(bars, observed):
        plt.text(rect.get_x() + rect.get_width() / 2.0, rect.get_height() + 1.0, f"{val:.1f}%", ha='center', va='bottom', fontsize=8)
    plt.legend()
    plt.tight_layout()
    plt.savefig(out_path)
    plt.close()


def run_tournament(dice_set: DiceSet, trials: int, cfg: GameConfig):
    source = RandomSource()
    matrix = probability_matrix(dice_set)
    face_counts: Counter = Counter()
    rows = []
    for i, j in itertools.permutations(dice_set.indices(), 2):
        result = run_pairing(dice_set[i], dice_set[j], trials, source, cfg, face_counts)
        rows.append({
            "dice_a": str(dice_set[i]),
            "dice_b": str(dice_set[j]),
            "trials": trials,
            "wins_a": result["wins_a"],
            "wins_b": result["wins_b"],
            "ties": result["ties"],
            "expected_a": matrix[i][j],
            "observed_a": result["wins_a"] / trials if trials else 0.0,
        })
    return rows, face_counts


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Simulate fair throws between every ordered pair of dice',
        epilog='Dice with negative faces go after "--", e.g. -- -1,2,3,4,5,6 2,2,4,4,9,9 6,8,1,1,8,6',
    )
    parser.add_argument('dice', type=str, nargs='*', default=DEFAULT_DICE, help='Dice definitions, six comma-separated integers each')
    parser.add_argument('--trials', type=int, default=1000, help='Throws per ordered pairing')
    parser.add_argument('--data-dir', type=str, default='data', help='Directory to save csv and charts')
    args = parser.parse_args(argv)

    cfg = GameConfig()
    try:
        dice_set = parse_dice_sets(args.dice, cfg)
    except ValidationError as e:
        parser.error(str(e))
    if args.trials < 1:
        parser.error('--trials must be at least 1')
    rows, face_counts = run_tournament(dice_set, args.trials, cfg)

    os.makedirs(args.data_dir, exist_ok=True)
    summary_csv = os.path.join(args.data_dir, "tournament_summary.csv")
    csv_io.append_rows_to_csv(rows, summary_csv, csv_io.get_summary_header())
    chart_path = os.path.join(args.data_dir, "tournament_win_rates.png")
    save_win_chart(rows, chart_path)

    for r in rows:
        print(f"{r['dice_a']} vs {r['dice_b']}: observed {r['observed_a']:.4f}, expected {r['expected_a']:.4f}")
    total = sum(face_counts.values())
    print("Face index distribution:")
    for index in range(cfg.faces_per_dice):
        share = face_counts[index] / total if total else 0.0
        print(f"  {index}: {face_counts[index]} ({share:.3%})")
    print(f"Summary written to {summary_csv}, chart to {chart_path}")


if __name__ == "__main__":
    main()
