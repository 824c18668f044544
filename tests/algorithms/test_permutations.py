import itertools
from math import factorial

import pytest

from routegraph.algorithms.permutations import Permutations, iter_permutations


def test_empty_input_yields_single_empty_ordering():
    assert list(iter_permutations([])) == [()]
    assert len(Permutations([])) == 1


def test_single_element():
    assert list(iter_permutations(["A"])) == [("A",)]


def test_first_ordering_is_input_order():
    assert next(iter_permutations(["C", "F", "A"])) == ("C", "F", "A")


def test_two_elements_order():
    assert list(iter_permutations(["C", "F"])) == [("C", "F"), ("F", "C")]


@pytest.mark.parametrize("n", [3, 4, 5, 6])
def test_all_orderings_exactly_once(n):
    items = list(range(n))
    produced = list(iter_permutations(items))
    assert len(produced) == factorial(n)
    assert len(set(produced)) == factorial(n)
    assert set(produced) == set(itertools.permutations(items))


def test_consecutive_orderings_differ_by_one_swap():
    produced = list(iter_permutations("ABCDE"))
    for prev, curr in zip(produced, produced[1:]):
        differing = [i for i, (a, b) in enumerate(zip(prev, curr)) if a != b]
        assert len(differing) == 2


def test_deterministic_for_fixed_input():
    assert list(iter_permutations("ABCD")) == list(iter_permutations("ABCD"))


def test_lazy_generation():
    gen = iter_permutations(range(12))
    # Only the first few of 12! orderings are materialized
    first = list(itertools.islice(gen, 3))
    assert len(first) == 3


def test_input_not_mutated():
    items = ["A", "B", "C"]
    list(iter_permutations(items))
    assert items == ["A", "B", "C"]


def test_permutations_is_restartable_and_sized():
    perms = Permutations(["A", "B", "C"])
    assert len(perms) == 6
    first_pass = list(perms)
    second_pass = list(perms)
    assert first_pass == second_pass
    assert len(first_pass) == 6
    assert perms.items == ("A", "B", "C")
