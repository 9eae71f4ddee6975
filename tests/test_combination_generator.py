import random

from src.availability.models import ScheduleItem
from src.scheduler.combination_generator import (
    CombinationGenerator,
    combination_signature,
    is_conflict_free,
)


def _items():
    return [
        ScheduleItem("Math", 540, 600, (0, 2)),
        ScheduleItem("Art", 570, 630, (0,)),
        ScheduleItem("Swim", 1080, 1140, (1,)),
        ScheduleItem("Code", 540, 600, (2,)),
    ]


def test_every_combination_is_conflict_free():
    combinations = CombinationGenerator(seed=7).generate(_items())
    assert combinations
    for combination in combinations:
        assert is_conflict_free(combination)


def test_same_seed_gives_the_same_result():
    first = CombinationGenerator(seed=42).generate(_items())
    second = CombinationGenerator(seed=42).generate(_items())
    assert first == second


def test_injected_rng_is_used():
    first = CombinationGenerator(rng=random.Random(3)).generate(_items())
    second = CombinationGenerator(rng=random.Random(3)).generate(_items())
    assert first == second


def test_combinations_are_distinct_and_largest_first():
    combinations = CombinationGenerator(max_attempts=50, seed=1).generate(_items())
    signatures = [combination_signature(c) for c in combinations]
    assert len(signatures) == len(set(signatures))
    sizes = [len(c) for c in combinations]
    assert sizes == sorted(sizes, reverse=True)
    # Swim never clashes with anything
    assert all(any(item.title == "Swim" for item in c) for c in combinations)


def test_max_combinations_caps_the_output():
    assert len(CombinationGenerator(max_combinations=1, seed=1).generate(_items())) == 1


def test_empty_input_falls_back_to_the_empty_combination():
    assert CombinationGenerator(seed=1).generate([]) == [[]]


def test_no_attempts_falls_back_to_the_original_items():
    items = _items()
    assert CombinationGenerator(max_attempts=0, seed=1).generate(items) == [items]


def test_compatible_items_give_one_combination():
    items = [ScheduleItem("A", 540, 600, (0,)), ScheduleItem("B", 600, 660, (0,)), ScheduleItem("C", 540, 600, (1,))]
    combinations = CombinationGenerator(seed=5).generate(items)
    assert len(combinations) == 1
    assert [i.title for i in combinations[0]] == ["A", "B", "C"]


def test_combination_is_in_timetable_order():
    for combination in CombinationGenerator(seed=9).generate(_items()):
        keys = [(i.weekdays, i.start, i.end, i.title) for i in combination]
        assert keys == sorted(keys)


def test_conflict_needs_a_shared_weekday():
    math, art, swim, code = _items()
    assert math.conflicts_with(art)
    assert math.conflicts_with(code)
    assert not art.conflicts_with(code)
    assert not is_conflict_free([math, art])
    assert is_conflict_free([art, swim, code])
