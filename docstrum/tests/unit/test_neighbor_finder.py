"""Unit tests for k-nearest-neighbour search."""

import math

import pytest
from docstrum.domain.services.neighbor_finder import (
    collect_angles,
    collect_distances,
    compute_neighbor_table,
    find_neighbors,
)
from docstrum.exceptions import InvalidConfigurationError
from docstrum.tests.conftest import glyph, text_lines


@pytest.fixture
def four_components():
    return [glyph(1, 0, 0), glyph(2, 10, 0), glyph(3, 20, 0), glyph(4, 10, 1)]


class TestFindNeighbors:
    """Single-reference queries."""

    def test_two_nearest(self, four_components):
        neighbors = find_neighbors(four_components[0], four_components, 2)
        assert len(neighbors) == 2
        first, second = neighbors.pairs
        assert first.neighbor.label == 2
        assert first.distance == 10.0
        assert first.angle == 0.0
        assert second.neighbor.label == 4
        assert second.distance == pytest.approx(math.sqrt(101))
        assert second.angle == pytest.approx(math.atan2(1, 10))

    def test_reference_excluded(self, four_components):
        neighbors = find_neighbors(four_components[1], four_components, 3)
        assert 2 not in [cc.label for cc in neighbors.neighbors]

    def test_sorted_and_distinct(self, make_lines):
        components = make_lines(angle_deg=12.0)
        for reference in components[::7]:
            neighbors = find_neighbors(reference, components, 5)
            distances = [pair.distance for pair in neighbors]
            assert distances == sorted(distances)
            labels = [cc.label for cc in neighbors.neighbors]
            assert len(set(labels)) == len(labels) == 5

    @pytest.mark.parametrize("n", [1, 2, 3])
    def test_fewer_components_than_k(self, n):
        components = [glyph(i, 10 * i, 0) for i in range(1, n + 1)]
        neighbors = find_neighbors(components[0], components, 5)
        assert len(neighbors) == n - 1

    def test_ties_broken_by_label(self):
        center = glyph(1, 0, 0)
        components = [center, glyph(9, -5, 0), glyph(4, 0, 5), glyph(7, 5, 0), glyph(2, 0, -5)]
        neighbors = find_neighbors(center, components, 4)
        assert [cc.label for cc in neighbors.neighbors] == [2, 4, 7, 9]

    def test_coincident_centroid_is_a_neighbour(self):
        a, b, c = glyph(1, 5, 5), glyph(2, 5, 5), glyph(3, 9, 5)
        neighbors = find_neighbors(a, [a, b, c], 1)
        assert neighbors.neighbors == [b]
        assert neighbors.pairs[0].distance == 0.0

    def test_angle_convention(self):
        a, b = glyph(1, 10, 0), glyph(2, 0, 0)
        # pointing along the negative x axis
        assert find_neighbors(a, [a, b], 1).pairs[0].angle == math.pi

    def test_empty_set(self):
        with pytest.raises(InvalidConfigurationError):
            find_neighbors(glyph(1, 0, 0), [], 5)

    @pytest.mark.parametrize("k", [0, -1, 1.5, True])
    def test_invalid_k(self, four_components, k):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            find_neighbors(four_components[0], four_components, k)
        assert exc_info.value.config_key == "k"


class TestNeighborTable:
    """Whole-page neighbour table."""

    def test_one_entry_per_component(self, horizontal_page):
        table = compute_neighbor_table(horizontal_page, 4)
        assert [ns.source for ns in table] == horizontal_page
        assert all(len(ns) == 4 for ns in table)

    def test_parallel_matches_serial(self):
        components = text_lines(angle_deg=-7.0, rows=4, per_row=25)
        serial = compute_neighbor_table(components, 5, max_workers=1)
        parallel = compute_neighbor_table(components, 5, max_workers=4)
        assert parallel == serial

    def test_single_component(self):
        table = compute_neighbor_table([glyph(1, 0, 0)], 3)
        assert len(table) == 1
        assert len(table[0]) == 0

    def test_empty_set(self):
        with pytest.raises(InvalidConfigurationError):
            compute_neighbor_table([], 5)

    def test_invalid_workers(self, horizontal_page):
        with pytest.raises(InvalidConfigurationError):
            compute_neighbor_table(horizontal_page, 5, max_workers=0)

    def test_collect(self, four_components):
        table = compute_neighbor_table(four_components, 2)
        assert collect_angles(table).shape == (8,)
        distances = collect_distances(table)
        assert distances.min() == 1.0  # (10, 0) <-> (10, 1)
