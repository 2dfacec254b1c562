"""
Tests for the eye.

Vision vectors are rendered as one character per cell so whole sectors can
be compared at a glance:
    '#'  energy >= 0.7
    '+'  energy >= 0.3
    '.'  energy >  0
    ' '  nothing seen
"""

import math

import numpy as np
import pytest

from eye import Eye, wrap_angle

CELLS = 13


def _render(vision):
    out = []
    for cell in vision:
        if cell >= 0.7:
            out.append("#")
        elif cell >= 0.3:
            out.append("+")
        elif cell > 0.0:
            out.append(".")
        else:
            out.append(" ")
    return "".join(out)


def _look(food, fov_range, fov_angle, x=0.5, y=0.5, heading=0.0):
    eye = Eye(fov_range, fov_angle, CELLS)
    return _render(eye.process_vision((x, y), heading, food))


# ============================================================================
# ASCII tables
# ============================================================================

@pytest.mark.parametrize("fov_range,expected", [
    (1.0, "      +      "),
    (0.9, "      +      "),
    (0.8, "      +      "),
    (0.7, "      .      "),
    (0.6, "      .      "),
    (0.5, "             "),
    (0.4, "             "),
    (0.3, "             "),
    (0.2, "             "),
    (0.1, "             "),
])
def test_ranges(fov_range, expected):
    assert _look([(1.0, 0.5)], fov_range, math.pi / 2) == expected


@pytest.mark.parametrize("heading,expected", [
    (0.00 * math.pi, "         +   "),
    (0.25 * math.pi, "        +    "),
    (0.50 * math.pi, "      +      "),
    (0.75 * math.pi, "    +        "),
    (1.00 * math.pi, "   +         "),
    (1.25 * math.pi, " +           "),
    (1.50 * math.pi, "            +"),
    (1.75 * math.pi, "           + "),
    (2.00 * math.pi, "         +   "),
    (2.25 * math.pi, "        +    "),
    (2.50 * math.pi, "      +      "),
])
def test_headings(heading, expected):
    assert _look([(0.5, 1.0)], 1.0, 2.0 * math.pi, heading=heading) == expected


@pytest.mark.parametrize("x,y,expected", [
    (0.9, 0.5, "#           #"),
    (0.8, 0.5, "  #       #  "),
    (0.7, 0.5, "   +     +   "),
    (0.6, 0.5, "    +   +    "),
    (0.5, 0.5, "    +   +    "),
    (0.4, 0.5, "     + +     "),
    (0.3, 0.5, "     . .     "),
    (0.2, 0.5, "     . .     "),
    (0.1, 0.5, "     . .     "),
    (0.0, 0.5, "             "),
    (0.5, 0.0, "            +"),
    (0.5, 0.1, "          + ."),
    (0.5, 0.2, "         +  +"),
    (0.5, 0.3, "        + +  "),
    (0.5, 0.4, "      +  +   "),
    (0.5, 0.6, "   +  +      "),
    (0.5, 0.7, "  + +        "),
    (0.5, 0.8, "+  +         "),
    (0.5, 0.9, ". +          "),
    (0.5, 1.0, "+            "),
])
def test_positions(x, y, expected):
    food = [(1.0, 0.4), (1.0, 0.6)]
    assert _look(food, 1.0, math.pi / 2, x=x, y=y) == expected


@pytest.mark.parametrize("fov_angle,expected", [
    (0.25 * math.pi, " +         + "),
    (0.50 * math.pi, ".  +     +  ."),
    (0.75 * math.pi, "  . +   + .  "),
    (1.00 * math.pi, "   . + + .   "),
    (1.25 * math.pi, "   . + + .   "),
    (1.50 * math.pi, ".   .+ +.   ."),
    (1.75 * math.pi, ".   .+ +.   ."),
    (2.00 * math.pi, "+.  .+ +.  .+"),
])
def test_angles(fov_angle, expected):
    food = [(0.0, 0.0), (0.0, 0.33), (0.0, 0.66), (0.0, 1.0),
            (1.0, 0.0), (1.0, 0.33), (1.0, 0.66), (1.0, 1.0)]
    assert _look(food, 1.0, fov_angle) == expected


# ============================================================================
# Energies and edge cases
# ============================================================================

def test_vision_has_one_value_per_cell():
    eye = Eye(0.25, math.pi, 9)
    vision = eye.process_vision((0.5, 0.5), 0.0, np.random.default_rng(0).random((50, 2)))
    assert vision.shape == (9,)
    assert vision.dtype == np.float64
    assert np.all(vision >= 0.0)


def test_no_food_sees_nothing():
    eye = Eye(0.25, math.pi, 9)
    np.testing.assert_array_equal(eye.process_vision((0.5, 0.5), 0.0, []), np.zeros(9))


def test_food_at_exact_range_is_invisible():
    eye = Eye(0.25, math.pi, 9)
    vision = eye.process_vision((0.5, 0.5), 0.0, [(0.75, 0.5)])
    assert not vision.any()


def test_food_on_top_of_the_animal_gives_full_energy():
    eye = Eye(0.25, math.pi, 9)
    vision = eye.process_vision((0.5, 0.5), 0.0, [(0.5, 0.5)])
    assert vision.sum() == 1.0


def test_energies_in_one_cell_add_up():
    eye = Eye(1.0, math.pi / 2, 1)
    vision = eye.process_vision((0.5, 0.5), 0.0, [(1.0, 0.5), (0.75, 0.5)])
    assert vision[0] == pytest.approx(0.5 + 0.75)


def test_food_behind_is_invisible():
    eye = Eye(1.0, math.pi / 2, 5)
    vision = eye.process_vision((0.5, 0.5), 0.0, [(0.2, 0.5)])
    assert not vision.any()


def test_vision_does_not_wrap_around_the_world():
    eye = Eye(0.25, math.pi, 9)
    vision = eye.process_vision((0.95, 0.5), 0.0, [(0.05, 0.5)])
    assert not vision.any()


@pytest.mark.parametrize("fov_range,fov_angle,cells", [
    (0.0, 1.0, 3),
    (-1.0, 1.0, 3),
    (1.0, 0.0, 3),
    (1.0, 1.0, 0),
])
def test_invalid_eye_raises(fov_range, fov_angle, cells):
    with pytest.raises(ValueError):
        Eye(fov_range, fov_angle, cells)


def test_from_config(small_config):
    eye = Eye.from_config(small_config)
    assert eye.cells == small_config.eye_cells
    assert eye.fov_range == small_config.eye_range
    assert eye.fov_angle == small_config.eye_fov


# ============================================================================
# wrap_angle
# ============================================================================

@pytest.mark.parametrize("angle,expected", [
    (0.0, 0.0),
    (math.pi, math.pi),
    (-math.pi, math.pi),
    (1.5 * math.pi, -0.5 * math.pi),
    (-1.5 * math.pi, 0.5 * math.pi),
    (2.0 * math.pi, 0.0),
])
def test_wrap_angle(angle, expected):
    assert wrap_angle(angle) == pytest.approx(expected, abs=1e-12)


def test_wrap_angle_range():
    angles = np.linspace(-20.0, 20.0, 1001)
    wrapped = wrap_angle(angles)
    assert np.all(wrapped > -math.pi)
    assert np.all(wrapped <= math.pi)
    np.testing.assert_allclose(np.cos(wrapped), np.cos(angles), atol=1e-9)
