"""Main CLI interface for the NFL matchup simulator."""

import argparse
import logging
import sys

from .analysis.distribution import export_distribution
from .analysis.narrative import summary_lines
from .data.loader import DataLoader
from .models.situation import SituationalInputs
from .simulation.engine import MatchupSimulator, SimulationRequest
from .simulation.errors import SimulationError
from .simulation.monte_carlo import VOLATILITY_PRESETS


def _load_inputs(args):
    """Load dataset and situation, resolving the default season."""
    dataset = DataLoader.load_league_from_json(args.input)
    situation = (
        DataLoader.load_situation_from_json(args.situation)
        if args.situation else SituationalInputs()
    )
    season = args.season if args.season is not None else dataset.latest_season
    return dataset, situation, season


def _build_request(args, situation, season) -> SimulationRequest:
    return SimulationRequest(
        team_a_id=args.team_a,
        team_b_id=args.team_b,
        season=season,
        situation=situation,
        iterations=getattr(args, "iterations", 1),
        volatility=getattr(args, "volatility", "realistic"),
        noise_level=getattr(args, "noise", None),
        sigmoid_k=args.k,
        random_seed=getattr(args, "seed", None),
    )


def _print_breakdown(breakdown, name_a: str, name_b: str):
    print(f"\n{'Category':<22}{name_a + ' off':>12}{name_b + ' off':>12}{'Net':>10}")
    net = breakdown.net_by_category()
    for adv_a, adv_b in zip(breakdown.a_offense, breakdown.b_offense):
        print(
            f"{adv_a.label:<22}{adv_a.advantage:>12.2f}{adv_b.advantage:>12.2f}"
            f"{net[adv_a.category]:>10.3f}"
        )


def simulate_matchup(args):
    """Run a Monte Carlo simulation for one matchup."""
    print(f"Loading league data from {args.input}...")
    try:
        dataset, situation, season = _load_inputs(args)
        simulator = MatchupSimulator(dataset, parallel_workers=args.workers)
        request = _build_request(args, situation, season)
        print(f"Simulating {args.team_a} vs {args.team_b} ({season}), {args.iterations} trials...")
        outcome = simulator.simulate(request)
    except (SimulationError, OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    name_a = outcome.matchup.team_a.team_name
    name_b = outcome.matchup.team_b.team_name
    summary = outcome.summary

    print(f"\n{'='*60}")
    print(f"{name_a} vs {name_b}")
    print(f"{'='*60}\n")
    print(f"Win probability: {name_a} {summary.win_prob_a:.1%} | {name_b} {summary.win_prob_b:.1%}")
    print(f"Baseline (no noise) delta: {outcome.baseline.delta:+.3f}")
    ladder = summary.percentiles
    print(
        "Delta percentiles: "
        + ", ".join(f"{k}={v:+.2f}" for k, v in ladder.to_dict().items())
    )
    print(f"IQR: {summary.iqr:.3f}")
    for label, text in summary_lines(summary, name_a, name_b):
        print(f"  {label}: {text}")
    for warning in summary.warnings:
        print(f"  Warning: {warning}")

    if args.breakdown:
        _print_breakdown(outcome.matchup.breakdown, name_a, name_b)

    if args.output:
        export = None
        if args.include_trials:
            export = export_distribution(outcome.population)
            print(f"Histogram: {len(export.bins)} bins, zero bin at {export.zero_bin_index}")
        print(f"\nSaving results to {args.output}...")
        DataLoader.save_outcome_to_json(
            outcome, args.output, include_trials=args.include_trials, distribution=export,
        )
    print("✓ Done!")
    return 0


def baseline_matchup(args):
    """Show the deterministic, zero-noise matchup."""
    try:
        dataset, situation, season = _load_inputs(args)
        simulator = MatchupSimulator(dataset)
        trial, matchup = simulator.baseline(_build_request(args, situation, season))
    except (SimulationError, OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    name_a, name_b = matchup.team_a.team_name, matchup.team_b.team_name
    print(f"{name_a} strength: {trial.strength_a:+.3f}")
    print(f"{name_b} strength: {trial.strength_b:+.3f}")
    print(f"Delta: {trial.delta:+.3f} -> {name_a} {trial.team_a_prob:.1%}")
    for side, adjusted in (("A", matchup.team_a), ("B", matchup.team_b)):
        if adjusted.cliffs:
            print(f"Team {side} cliffs: {', '.join(adjusted.cliffs)}")
    _print_breakdown(matchup.breakdown, name_a, name_b)
    return 0


def create_sample(args):
    """Create sample data files."""
    print(f"Creating sample data at {args.output}...")
    DataLoader.create_sample_data(args.output, args.situation_output)
    print("✓ Sample data created!")
    print("\nYou can now run a simulation with:")
    print(f"  python -m src.main simulate --input {args.output} KC BUF")
    return 0


def _add_matchup_arguments(parser):
    parser.add_argument("team_a", help="Team A id")
    parser.add_argument("team_b", help="Team B id")
    parser.add_argument("--input", "-i", required=True, help="League dataset JSON")
    parser.add_argument("--situation", default=None, help="Situation snapshot JSON")
    parser.add_argument("--season", type=int, default=None, help="Season (default: most recent)")
    parser.add_argument("--k", type=float, default=0.65, help="Sigmoid steepness")


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="NFL Matchup Simulator - Monte Carlo head-to-head projections"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    simulate_parser = subparsers.add_parser("simulate", help="Run a Monte Carlo simulation")
    _add_matchup_arguments(simulate_parser)
    simulate_parser.add_argument("--iterations", "-n", type=int, default=10000, help="Number of trials")
    simulate_parser.add_argument(
        "--volatility",
        choices=sorted(VOLATILITY_PRESETS),
        default="realistic",
        help="Noise preset",
    )
    simulate_parser.add_argument("--noise", type=float, default=None, help="Explicit noise level (overrides preset)")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    simulate_parser.add_argument("--workers", type=int, default=1, help="Parallel worker processes")
    simulate_parser.add_argument("--breakdown", action="store_true", help="Print the category breakdown")
    simulate_parser.add_argument("--output", "-o", default=None, help="Write results JSON")
    simulate_parser.add_argument("--include-trials", action="store_true", help="Include every trial delta and the histogram/density export in the output")

    baseline_parser = subparsers.add_parser("baseline", help="Deterministic zero-noise matchup")
    _add_matchup_arguments(baseline_parser)

    sample_parser = subparsers.add_parser("sample", help="Create sample league data")
    sample_parser.add_argument("--output", "-o", default="sample_league.json", help="Output league JSON")
    sample_parser.add_argument("--situation-output", default=None, help="Also write a sample situation JSON")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        return simulate_matchup(args)
    elif args.command == "baseline":
        return baseline_matchup(args)
    elif args.command == "sample":
        return create_sample(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
