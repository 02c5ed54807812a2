#!/usr/bin/env python3
"""
Monte Carlo driver script for reskine

Examples:
    python monte_carlo.py --energy 2.0 --events 1000
    python monte_carlo.py --energy 1.5 --resonance P33_1232 --events 500 --seed 42 --output res.csv
"""

import argparse
import csv
import logging

import numpy as np

from reskine.cache_db import MaxXSecCacheDB
from reskine.config import KinematicsConfig
from reskine.event_generator import estimate_total_xsec, make_event_factory, simulate_batch
from reskine.kinematics_generator import ResonanceKinematicsGenerator
from reskine.max_xsec_cache import MaxXSecCache
from reskine.ranges import RangeComputer
from reskine.resonances import resonance_from_name
from reskine.xsec import FlatXSecModel, ToyResonanceModel

MODELS = {
    "toy": ToyResonanceModel,
    "flat": FlatXSecModel,
}


def export_events_to_csv(events, filename):
    """Export selected kinematics to CSV."""
    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["event", "E", "W", "Q2", "x", "y", "diff_xsec", "weight"])
        for i, event in enumerate(events):
            kine = event.interaction.kinematics
            E = event.interaction.initial_state.probe_p4.E
            writer.writerow([i, E, kine.W, kine.Q2, kine.x, kine.y, event.diff_xsec, event.weight])
    print(f"📄 Exported {len(events)} events to {filename}")


def build_parser():
    return argparse.ArgumentParser(
        description="reskine resonance kinematics generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  python monte_carlo.py --energy 2.0 --events 1000
  python monte_carlo.py --energy 1.5 --resonance P33_1232 --seed 42
  python monte_carlo.py --energy 3.0 --uniform --model flat --output flat.csv"""
    )


def main():
    parser = build_parser()
    parser.add_argument("--probe", type=int, default=14, help="Probe PDG ID (default 14, numu)")
    parser.add_argument("--energy", type=float, required=True, help="Probe energy in GeV")
    parser.add_argument("--energy-spread", type=float, default=0.0, help="Fractional energy smearing")
    parser.add_argument("--resonance", type=str, default="P33_1232", help='Resonance (e.g. "P33_1232", "unknown")')
    parser.add_argument("--current", choices=["CC", "NC", "EM"], default="CC")
    parser.add_argument("--nucleon", type=int, default=2212, help="Hit nucleon PDG ID (default 2212)")
    parser.add_argument("--model", choices=sorted(MODELS), default="toy", help="Cross section model")
    parser.add_argument("--events", type=int, default=10, help="Number of events (default 10)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (optional)")
    parser.add_argument("--config", type=str, default=None, help="YAML kinematics config")
    parser.add_argument("--uniform", action="store_true", help="Generate uniformly over phase space (weighted)")
    parser.add_argument("--cache-db", type=str, default=None, help="SQLite file for the max xsec cache")
    parser.add_argument("--verbose", action="store_true", help="Show progress output")
    parser.add_argument("--output", type=str, help="Export selected kinematics to CSV file")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = KinematicsConfig.from_path(args.config) if args.config else KinematicsConfig()
    if args.uniform:
        config.uniform_over_phase_space = True

    rng = np.random.default_rng(args.seed)
    model = MODELS[args.model]()
    ranges = RangeComputer(config)
    db = MaxXSecCacheDB(args.cache_db) if args.cache_db else None
    cache = MaxXSecCache(model, ranges, config, db=db)
    generator = ResonanceKinematicsGenerator(model, config, cache=cache, rng=rng)

    total_xsec = None
    if config.uniform_over_phase_space:
        total_xsec = lambda interaction: estimate_total_xsec(model, interaction, ranges)

    make_event = make_event_factory(
        args.probe,
        args.energy,
        resonance=resonance_from_name(args.resonance),
        current=args.current,
        hit_nucleon_pdg=args.nucleon,
        energy_spread=args.energy_spread,
        total_xsec=total_xsec,
        rng=rng,
    )

    print("\n" + "=" * 60)
    print("🔥 reskine Resonance Kinematics Generator")
    print("=" * 60)
    print(f"Probe / Energy   : {args.probe} / {args.energy} GeV")
    print(f"Resonance        : {args.resonance} ({args.current})")
    print(f"Model            : {model.name}")
    print(f"Mode             : {'uniform (weighted)' if config.uniform_over_phase_space else 'importance (unweighted)'}")
    print(f"Number of Events : {args.events}")
    print(f"Random Seed      : {args.seed if args.seed is not None else 'None'}")
    if args.output:
        print(f"CSV Output       : {args.output}")
    print("=" * 60 + "\n")

    results = simulate_batch(make_event, generator, n=args.events)
    events = results["events"]

    print("\n" + "=" * 60)
    print("✅ Generation Complete")
    print("=" * 60)
    print(f"Successful events : {results['success']}/{results['total']}")
    print(f"Failed events     : {results['failed']}")
    print(f"Selection eff.    : {results['efficiency']:.2%}")
    if events:
        W = np.array([e.interaction.kinematics.W for e in events])
        Q2 = np.array([e.interaction.kinematics.Q2 for e in events])
        weights = np.array([e.weight for e in events])
        print(f"<W>  = {W.mean():.4f} GeV   <Q2> = {Q2.mean():.4f} GeV^2")
        print(f"<w>  = {weights.mean():.4f}")
    else:
        print("No events generated.")
    print("=" * 60 + "\n")

    if args.output:
        export_events_to_csv(events, args.output)


if __name__ == "__main__":
    main()
