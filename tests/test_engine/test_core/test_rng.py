import pytest

from engine.core.rng import RandomSource


def test_randint_inclusive_bounds():
    rng = RandomSource(seed=3)
    rolls = {rng.randint(1, 3) for _ in range(200)}
    assert rolls == {1, 2, 3}


def test_randint_fractional_bounds():
    rng = RandomSource(seed=5)
    # [-4.5, 4.5] rounds inward to [-4, 4]
    for _ in range(200):
        assert -4 <= rng.randint(-4.5, 4.5) <= 4


def test_randint_empty_range_collapses_to_low():
    rng = RandomSource(seed=1)
    assert rng.randint(0.2, 0.8) == 1
    assert rng.randint(5, 2) == 5


def test_same_seed_same_sequence():
    a = RandomSource(seed=42)
    b = RandomSource(seed=42)
    assert [a.percent() for _ in range(20)] == [b.percent() for _ in range(20)]


def test_roll_extremes():
    rng = RandomSource(seed=9)
    assert all(rng.roll(100) for _ in range(50))
    assert not any(rng.roll(0) for _ in range(50))
    assert not any(rng.roll(-20) for _ in range(50))


def test_choice():
    rng = RandomSource(seed=2)
    assert rng.choice(["only"]) == "only"
    with pytest.raises(IndexError):
        rng.choice([])


def test_state_round_trip():
    rng = RandomSource(seed=11)
    state = rng.get_state()
    first = [rng.percent() for _ in range(5)]
    rng.set_state(state)
    assert [rng.percent() for _ in range(5)] == first
