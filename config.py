"""
ForageSim Configuration
All tunable parameters for the foraging / neuroevolution simulation.

Module-level constants are the defaults; a run uses an immutable `Config`
built from them (optionally overridden from the CLI, a JSON file or the
HTTP server).
"""

import dataclasses
from dataclasses import dataclass, field
from math import pi

from genome import Crossover, Mutation
from selection import Selection

# ─── Eye ──────────────────────────────────────────────────────────────────────
EYE_FOV   = pi + pi / 2   # field of view (radians)
EYE_RANGE = 0.25          # how far an animal can see (world units)
EYE_CELLS = 9             # photoreceptors = brain input neurons

# ─── Brain ────────────────────────────────────────────────────────────────────
BRAIN_NEURONS = 9         # hidden layer width (outputs are always 2)

# ─── Movement ─────────────────────────────────────────────────────────────────
SPEED_MIN   = 0.002       # world units per tick
SPEED_MAX   = 0.6
SPEED_ACCEL = 0.2         # max speed change per tick
ROT_ACCEL   = pi / 2      # max heading change per tick (radians)

# ─── Population ───────────────────────────────────────────────────────────────
GENERATION_LENGTH = 3000  # ticks per generation
ANIMAL_COUNT      = 30
FOOD_COUNT        = 100
COLLISION_DISTANCE = 0.02 # an animal eats food closer than this

# ─── Genetic operators ────────────────────────────────────────────────────────
SELECTION_METHOD   = Selection.ROULETTE
MUTATION_CHANCE    = 0.01
MUTATION_COEFF     = 0.3
CROSSOVER_METHOD   = Crossover.UNIFORM

# ─── Output / Logging ─────────────────────────────────────────────────────────
SAVE_DIR           = "output"      # directory for saved images and charts
SNAPSHOT_INTERVAL  = 10            # save a world snapshot every N generations
SAVE_BRAIN_SAMPLE  = True          # save brain weight diagrams
LOG_CSV            = True          # write per-generation CSV log

# ─── Server ───────────────────────────────────────────────────────────────────
SERVER_HOST = "0.0.0.0"
SERVER_PORT = 5000


@dataclass(frozen=True)
class Config:
    """Immutable bundle of every tunable used by one simulation run."""

    eye_fov:           float = EYE_FOV
    eye_range:         float = EYE_RANGE
    eye_cells:         int   = EYE_CELLS
    brain_neurons:     int   = BRAIN_NEURONS
    speed_min:         float = SPEED_MIN
    speed_max:         float = SPEED_MAX
    speed_accel:       float = SPEED_ACCEL
    rot_accel:         float = ROT_ACCEL
    generation_length: int   = GENERATION_LENGTH
    animal_count:      int   = ANIMAL_COUNT
    food_count:        int   = FOOD_COUNT
    selection_method:  Selection = SELECTION_METHOD
    mutation_method:   Mutation  = field(
        default_factory=lambda: Mutation.gaussian(MUTATION_CHANCE, MUTATION_COEFF))
    crossover_method:  Crossover = CROSSOVER_METHOD

    def __post_init__(self):
        if not self.eye_fov > 0:
            raise ValueError(f"eye_fov must be positive, got {self.eye_fov}")
        if not self.eye_range > 0:
            raise ValueError(f"eye_range must be positive, got {self.eye_range}")
        if self.eye_cells < 1:
            raise ValueError(f"eye_cells must be >= 1, got {self.eye_cells}")
        if self.brain_neurons < 1:
            raise ValueError(f"brain_neurons must be >= 1, got {self.brain_neurons}")
        if not 0 <= self.speed_min <= self.speed_max:
            raise ValueError(
                f"need 0 <= speed_min <= speed_max, got "
                f"{self.speed_min}..{self.speed_max}")
        if self.speed_accel < 0 or self.rot_accel < 0:
            raise ValueError("accelerations must be non-negative")
        if self.generation_length < 0:
            raise ValueError(
                f"generation_length must be >= 0, got {self.generation_length}")
        if self.animal_count < 1:
            raise ValueError(f"animal_count must be >= 1, got {self.animal_count}")
        if self.food_count < 0:
            raise ValueError(f"food_count must be >= 0, got {self.food_count}")
        if not isinstance(self.selection_method, Selection):
            raise ValueError(f"unknown selection method {self.selection_method!r}")
        if not isinstance(self.mutation_method, Mutation):
            raise ValueError(f"unknown mutation method {self.mutation_method!r}")
        if not isinstance(self.crossover_method, Crossover):
            raise ValueError(f"unknown crossover method {self.crossover_method!r}")

    # ──────────────────────────────────────────────────────────────────────────

    def replace(self, **changes) -> "Config":
        """Return a copy with some fields changed (validated again)."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict:
        """JSON-compatible representation (operators by name)."""
        data = {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}
        data["selection_method"] = self.selection_method.label
        data["mutation_method"]  = self.mutation_method.to_dict()
        data["crossover_method"] = self.crossover_method.label
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """
        Build a Config from a (possibly partial) dict as produced by
        `to_dict`. Missing keys keep their defaults; unknown keys raise.
        """
        known   = {f.name: f for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"unknown config keys: {', '.join(unknown)}")

        kwargs = {}
        for name, value in data.items():
            if name == "selection_method":
                value = Selection.parse(value)
            elif name == "mutation_method":
                value = Mutation.from_dict(value)
            elif name == "crossover_method":
                value = Crossover.parse(value)
            elif known[name].type == "int" or known[name].type is int:
                value = _as_int(name, value)
            else:
                value = _as_float(name, value)
            kwargs[name] = value
        return cls(**kwargs)


def _as_int(name: str, value) -> int:
    try:
        as_float = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if not as_float.is_integer():
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return int(as_float)


def _as_float(name: str, value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
