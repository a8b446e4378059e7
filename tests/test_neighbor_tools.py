import math

import pytest

from voxmap.neighbor_tools import neighbors


def _offsets(index, connectivity):
    return [
        (tuple(n - i for n, i in zip(nb, index)), d)
        for nb, d in neighbors(index, connectivity)
    ]


def test_six_connectivity_faces():
    result = _offsets((3, -2, 5), 6)
    assert len(result) == 6
    for offset, distance in result:
        assert sum(abs(c) for c in offset) == 1
        assert distance == 1.0


@pytest.mark.parametrize("connectivity", [6, 18, 26])
def test_neighbors_unique_and_exclude_center(connectivity):
    index = (0, 0, 0)
    result = [nb for nb, _ in neighbors(index, connectivity)]
    assert len(result) == connectivity
    assert len(set(result)) == connectivity
    assert index not in result


def test_distance_matches_offset_norm():
    for offset, distance in _offsets((10, 10, 10), 26):
        assert distance == pytest.approx(math.sqrt(sum(c * c for c in offset)))


def test_eighteen_excludes_corners():
    result = _offsets((0, 0, 0), 18)
    assert all(sum(abs(c) for c in off) <= 2 for off, _ in result)


def test_twenty_six_covers_full_cube():
    result = {nb for nb, _ in neighbors((1, 1, 1), 26)}
    expected = {
        (x, y, z)
        for x in range(3)
        for y in range(3)
        for z in range(3)
        if (x, y, z) != (1, 1, 1)
    }
    assert result == expected


def test_invalid_connectivity():
    with pytest.raises(ValueError):
        list(neighbors((0, 0, 0), 8))