import itertools
import math

import pytest

from voxgrid.neighbor_tools import neighbors


def _offset(center, neighbor):
    return tuple(n - c for n, c in zip(neighbor, center))


def test_six_connectivity_faces_at_unit_distance():
    center = (3, -2, 5)
    result = neighbors(center, 6)
    assert len(result) == 6
    for index, distance in result:
        assert distance == 1.0
        assert sum(abs(d) for d in _offset(center, index)) == 1


def test_first_neighbor_is_negative_x():
    assert neighbors((0, 0, 0), 6)[0] == ((-1, 0, 0), 1.0)


def test_eighteen_connectivity_excludes_corners():
    center = (0, 0, 0)
    result = neighbors(center, 18)
    offsets = {_offset(center, index) for index, _ in result}
    assert len(offsets) == 18
    assert all(sum(1 for d in off if d) <= 2 for off in offsets)


def test_twenty_six_connectivity_covers_full_cube():
    center = (10, 20, 30)
    result = neighbors(center, 26)
    offsets = {_offset(center, index) for index, _ in result}
    expected = set(itertools.product((-1, 0, 1), repeat=3)) - {(0, 0, 0)}
    assert offsets == expected


def test_distances_match_offset_length():
    center = (1, 1, 1)
    for index, distance in neighbors(center, 26):
        off = _offset(center, index)
        assert distance == pytest.approx(math.sqrt(sum(d * d for d in off)))


def test_smaller_connectivity_is_prefix():
    assert neighbors((0, 0, 0), 18)[:6] == neighbors((0, 0, 0), 6)
    assert neighbors((0, 0, 0), 26)[:18] == neighbors((0, 0, 0), 18)


def test_invalid_connectivity_raises():
    with pytest.raises(ValueError):
        neighbors((0, 0, 0), 8)