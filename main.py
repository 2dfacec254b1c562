"""
ForageSim – Main Entry Point
============================

Usage examples:
  python main.py                                  # defaults, 100 generations
  python main.py --gens 20 --gen_length 1000      # shorter run
  python main.py --selection tournament           # different parent selection
  python main.py --mutation_chance 0.05 --mutation_coeff 0.5
  python main.py --eye_cells 13 --brain_neurons 16
  python main.py --config my_config.json          # JSON produced by Config.to_dict()
  python main.py --workers 4 --seed 42            # threaded brain pass, reproducible
"""

import argparse
import json

import numpy as np

from brain import Brain
from config import (Config, SAVE_DIR, SNAPSHOT_INTERVAL, SAVE_BRAIN_SAMPLE,
                    EYE_FOV, EYE_RANGE, EYE_CELLS, BRAIN_NEURONS,
                    SPEED_MIN, SPEED_MAX, SPEED_ACCEL, ROT_ACCEL,
                    GENERATION_LENGTH, ANIMAL_COUNT, FOOD_COUNT,
                    MUTATION_CHANCE, MUTATION_COEFF)
from genome import Crossover, Mutation
from selection import Selection
from simulation import Simulation
from visualizer import (ensure_dirs, save_world_snapshot,
                        save_evolution_chart, save_brain_diagram,
                        append_csv)


# ──────────────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="ForageSim – neuroevolution of foraging animals")
    p.add_argument("--gens",          type=int,   default=100,
                   help="Number of generations to run")
    p.add_argument("--config",        default=None,
                   help="JSON config file (flags given explicitly override it)")

    g = p.add_argument_group("simulation")
    g.add_argument("--eye_fov",       type=float, default=EYE_FOV,
                   help="Field of view (radians)")
    g.add_argument("--eye_range",     type=float, default=EYE_RANGE,
                   help="Vision range (world units)")
    g.add_argument("--eye_cells",     type=int,   default=EYE_CELLS,
                   help="Photoreceptor count (= brain inputs)")
    g.add_argument("--brain_neurons", type=int,   default=BRAIN_NEURONS,
                   help="Hidden layer width")
    g.add_argument("--speed_min",     type=float, default=SPEED_MIN)
    g.add_argument("--speed_max",     type=float, default=SPEED_MAX)
    g.add_argument("--speed_accel",   type=float, default=SPEED_ACCEL)
    g.add_argument("--rot_accel",     type=float, default=ROT_ACCEL)
    g.add_argument("--gen_length",    type=int,   default=GENERATION_LENGTH,
                   help="Ticks per generation")
    g.add_argument("--animals",       type=int,   default=ANIMAL_COUNT,
                   help="Population size")
    g.add_argument("--food",          type=int,   default=FOOD_COUNT,
                   help="Food items in the world")
    g.add_argument("--selection",     default=Selection.ROULETTE.label,
                   choices=[n.lower() for n in Selection.names()] + Selection.names(),
                   help="Parent selection method")
    g.add_argument("--mutation_chance", type=float, default=MUTATION_CHANCE,
                   help="Per-gene mutation probability")
    g.add_argument("--mutation_coeff",  type=float, default=MUTATION_COEFF,
                   help="Maximum mutation step")
    g.add_argument("--crossover",     default=Crossover.UNIFORM.label,
                   choices=[n.lower() for n in Crossover.names()] + Crossover.names(),
                   help="Crossover method")

    r = p.add_argument_group("run")
    r.add_argument("--seed",          type=int,   default=None,
                   help="Random seed for reproducibility")
    r.add_argument("--workers",       type=int,   default=None,
                   help="Threads for the brain/movement pass")
    r.add_argument("--outdir",        default=SAVE_DIR,
                   help="Output directory")
    r.add_argument("--snapshot_interval", type=int, default=SNAPSHOT_INTERVAL,
                   help="Save world snapshot every N generations")
    return p, p.parse_args(argv)


# Flag name → Config field, for flags that map one-to-one
_FLAG_FIELDS = {
    "eye_fov":       "eye_fov",
    "eye_range":     "eye_range",
    "eye_cells":     "eye_cells",
    "brain_neurons": "brain_neurons",
    "speed_min":     "speed_min",
    "speed_max":     "speed_max",
    "speed_accel":   "speed_accel",
    "rot_accel":     "rot_accel",
    "gen_length":    "generation_length",
    "animals":       "animal_count",
    "food":          "food_count",
}


def build_config(parser, args) -> Config:
    """
    Defaults < JSON file < flags that differ from their defaults.
    """
    data = {}
    if args.config:
        with open(args.config) as f:
            data.update(json.load(f))

    for flag, field_name in _FLAG_FIELDS.items():
        value = getattr(args, flag)
        if value != parser.get_default(flag) or field_name not in data:
            data[field_name] = value

    if args.selection != parser.get_default("selection") or "selection_method" not in data:
        data["selection_method"] = args.selection
    if args.crossover != parser.get_default("crossover") or "crossover_method" not in data:
        data["crossover_method"] = args.crossover
    if (args.mutation_chance != parser.get_default("mutation_chance")
            or args.mutation_coeff != parser.get_default("mutation_coeff")
            or "mutation_method" not in data):
        data["mutation_method"] = Mutation.gaussian(
            args.mutation_chance, args.mutation_coeff).to_dict()

    return Config.from_dict(data)


# ──────────────────────────────────────────────────────────────────────────────
# Callbacks
# ──────────────────────────────────────────────────────────────────────────────

class SimCallbacks:
    """Bundles the per-generation callbacks used by the simulation."""

    def __init__(self, outdir: str, snapshot_interval: int):
        self.outdir            = outdir
        self.snapshot_interval = snapshot_interval

    def on_generation(self, gen_idx, stats, sim):
        # CSV log
        append_csv({"generation": gen_idx, **stats.as_dict()}, self.outdir)

        if gen_idx % self.snapshot_interval == 0:
            path = save_world_snapshot(sim.world(), gen_idx, self.outdir)
            print(f"  → Snapshot: {path}")

            # Brain of the animal that ate the most this generation
            if SAVE_BRAIN_SAMPLE and sim.last_population:
                best = max(sim.last_population, key=lambda ind: ind.fitness())
                brain = Brain.from_chromosome(best.chromosome(), sim.config)
                npath = save_brain_diagram(
                    brain.network, gen_idx, "best", self.outdir)
                if npath:
                    print(f"  → Brain diagram: {npath}")

        # Chart update every 50 gens
        if gen_idx % 50 == 0 and gen_idx > 0:
            save_evolution_chart(sim.history, self.outdir)


# ──────────────────────────────────────────────────────────────────────────────
# Main
# ──────────────────────────────────────────────────────────────────────────────

def main(argv=None):
    parser, args = parse_args(argv)
    config = build_config(parser, args)
    outdir = args.outdir
    ensure_dirs(outdir)

    print("=" * 60)
    print("  ForageSim – Neuroevolution of Foraging Animals")
    print("=" * 60)
    print(f"  Animals    : {config.animal_count}")
    print(f"  Food       : {config.food_count}")
    print(f"  Generations: {args.gens}")
    print(f"  Ticks/gen  : {config.generation_length}")
    print(f"  Brain      : {Brain.topology(config)}")
    print(f"  Selection  : {config.selection_method.label}")
    print(f"  Mutation   : {config.mutation_method}")
    print(f"  Crossover  : {config.crossover_method.label}")
    print(f"  Output dir : {outdir}")
    print("=" * 60)

    rng = np.random.default_rng(args.seed)
    cb  = SimCallbacks(outdir=outdir, snapshot_interval=args.snapshot_interval)

    with Simulation.random(rng, config, workers=args.workers) as sim:
        sim.run(rng, args.gens, on_generation=cb.on_generation)

        # Final chart
        print("\nSaving final evolution chart …")
        chart_path = save_evolution_chart(sim.history, outdir, "evolution_final.png")
        print(f"  → {chart_path}")

        snap = save_world_snapshot(sim.world(), sim.generation, outdir, "final")
        print(f"  → Final snapshot: {snap}")

    print("\nDone! All outputs saved to:", outdir)


if __name__ == "__main__":
    main()
