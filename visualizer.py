"""
Visualizer for ForageSim.

Produces:
  1. World snapshots – animals (with heading arrows) and food on the unit square
  2. Evolution chart – min / avg / max fitness over generations
  3. Brain diagrams  – weight matrices of one animal's network
  4. CSV log         – per-generation stats

Everything here works from plain data (world snapshots, Statistics,
networks) and never touches a running simulation.
"""

import os
import csv
import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend (no display needed)
import matplotlib.pyplot as plt

from config import SAVE_DIR, LOG_CSV


# ──────────────────────────────────────────────────────────────────────────────
# Directory setup
# ──────────────────────────────────────────────────────────────────────────────

def ensure_dirs(base: str = SAVE_DIR):
    for sub in ("snapshots", "charts", "brains"):
        os.makedirs(os.path.join(base, sub), exist_ok=True)


# ──────────────────────────────────────────────────────────────────────────────
# World snapshot
# ──────────────────────────────────────────────────────────────────────────────

def save_world_snapshot(snapshot: dict, generation: int, base: str = SAVE_DIR,
                        label: str = ""):
    """
    Render a world snapshot (as returned by `Simulation.world()`).
    Food is drawn as small dots, animals as dots with a short arrow
    along their heading.
    """
    fig, ax = plt.subplots(figsize=(6, 6), dpi=100)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_aspect("equal")
    ax.set_facecolor("#111111")
    fig.patch.set_facecolor("#111111")
    ax.set_title(f"Generation {generation}  "
                 f"({len(snapshot['animals'])} animals, "
                 f"{len(snapshot['food'])} food)",
                 color="white", fontsize=10)
    ax.tick_params(colors="white")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444444")

    food = snapshot["food"]
    if food:
        ax.scatter([f["x"] for f in food], [f["y"] for f in food],
                   c="#CBE4DE", s=6, linewidths=0, zorder=2)

    animals = snapshot["animals"]
    if animals:
        xs = [a["x"] for a in animals]
        ys = [a["y"] for a in animals]
        headings = np.array([a["heading"] for a in animals])
        ax.scatter(xs, ys, c="#0E8388", edgecolors="#DDDDDD",
                   linewidths=0.5, s=30, zorder=3)
        ax.quiver(xs, ys, np.cos(headings), np.sin(headings),
                  color="#DDDDDD", angles="xy", scale_units="xy",
                  scale=40, width=0.003, zorder=4)

    suffix = f"_{label}" if label else ""
    path = os.path.join(base, "snapshots", f"gen_{generation:06d}{suffix}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Evolution statistics chart
# ──────────────────────────────────────────────────────────────────────────────

def save_evolution_chart(history: list, base: str = SAVE_DIR,
                         filename: str = "evolution.png"):
    """
    Plot min / avg / max fitness (food eaten) across all generations.
    `history` is a list of Statistics.
    """
    if not history:
        return
    gens = list(range(len(history)))
    mins = [s.min_fitness for s in history]
    avgs = [s.avg_fitness for s in history]
    maxs = [s.max_fitness for s in history]

    fig, ax = plt.subplots(figsize=(12, 5), dpi=100)
    fig.patch.set_facecolor("#111111")
    ax.set_facecolor("#111111")

    ax.fill_between(gens, mins, maxs, color="#44FF44", alpha=0.12, zorder=1)
    ax.plot(gens, maxs, color="#44FF44", linewidth=1.0, label="Max", zorder=3)
    ax.plot(gens, avgs, color="#CC44FF", linewidth=1.2, label="Avg", zorder=3)
    ax.plot(gens, mins, color="#FF8800", linewidth=0.8, alpha=0.8,
            label="Min", zorder=2)

    ax.set_xlabel("Generation", color="white")
    ax.set_ylabel("Food eaten", color="white")
    ax.set_ylim(0, max(maxs) * 1.05 if max(maxs) > 0 else 1)
    ax.tick_params(axis="both", colors="white")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444444")

    ax.legend(facecolor="#222222", labelcolor="white",
              loc="upper left", fontsize=8)
    ax.set_title("Evolutionary Progress", color="white", fontsize=12)
    plt.tight_layout()
    path = os.path.join(base, "charts", filename)
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Brain diagram
# ──────────────────────────────────────────────────────────────────────────────

def save_brain_diagram(network, generation: int, label: str = "",
                       base: str = SAVE_DIR):
    """
    Draw every layer's weight matrix (outputs × inputs) with its bias column
    as a heat map. Green = positive, red = negative.
    """
    layers = network.layers
    if not layers:
        return

    fig, axes = plt.subplots(1, len(layers), figsize=(4 * len(layers), 4),
                             dpi=100, squeeze=False)
    fig.patch.set_facecolor("#111111")

    limit = max(float(np.abs(np.hstack([l.weights.ravel(), l.biases])).max())
                for l in layers) or 1.0

    for i, (ax, layer) in enumerate(zip(axes[0], layers)):
        matrix = np.hstack([layer.weights, layer.biases[:, None]])
        im = ax.imshow(matrix, cmap="RdYlGn", vmin=-limit, vmax=limit,
                       aspect="auto")
        ax.set_title(f"Layer {i}: {layer.input_size} → {layer.output_size}",
                     color="white", fontsize=9)
        ax.set_xlabel("inputs | bias", color="#CCCCCC", fontsize=8)
        ax.set_ylabel("neurons", color="#CCCCCC", fontsize=8)
        ax.tick_params(colors="white", labelsize=6)

    fig.colorbar(im, ax=list(axes[0]), shrink=0.8)
    fig.suptitle(f"Gen {generation} — Brain of {label or 'animal'}  "
                 f"(topology {network.topology()})",
                 color="white", fontsize=10)

    path = os.path.join(base, "brains", f"gen_{generation:06d}_{label}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# CSV log
# ──────────────────────────────────────────────────────────────────────────────

def append_csv(row: dict, base: str = SAVE_DIR):
    """Append one generation's stats to a CSV file."""
    if not LOG_CSV:
        return
    path = os.path.join(base, "evolution_log.csv")
    file_exists = os.path.isfile(path)
    with open(path, "a", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(row.keys()))
        if not file_exists:
            writer.writeheader()
        writer.writerow(row)
    return path
