"""test/test_tree_store.py - TreeStore 测试"""
import math

import numpy as np
import pytest

from grid_rrt.models import InvalidNodeIndexError
from grid_rrt.tree_store import TreeStore


@pytest.fixture
def chain_tree():
    """root(0,0) → 1(3,4) → 2(6,8)，另有 3(0,10) 挂在 root 下"""
    tree = TreeStore()
    tree.add_node([0.0, 0.0], None, 0.0)
    tree.add_node([3.0, 4.0], 0, 5.0)
    tree.add_node([6.0, 8.0], 1, 10.0)
    tree.add_node([0.0, 10.0], 0, 10.0)
    return tree


class TestAddNode:

    def test_indices_are_sequential(self):
        tree = TreeStore()
        assert tree.add_node([0.0, 0.0], None, 0.0) == 0
        assert tree.add_node([1.0, 0.0], 0, 1.0) == 1
        assert tree.add_node([2.0, 0.0], 1, 2.0) == 2
        assert len(tree) == 3

    def test_root_parent_is_none(self, chain_tree):
        assert chain_tree.parent(0) is None
        assert chain_tree.parent(2) == 1

    def test_grows_past_capacity(self):
        tree = TreeStore(capacity=2)
        tree.add_node([0.0, 0.0], None, 0.0)
        for i in range(1, 10):
            tree.add_node([float(i), 0.0], i - 1, float(i))
        assert len(tree) == 10
        np.testing.assert_array_almost_equal(tree.position(9), [9.0, 0.0])
        assert tree.parent(9) == 8
        assert tree.cost(5) == pytest.approx(5.0)

    def test_invalid_parent_raises(self):
        tree = TreeStore()
        tree.add_node([0.0, 0.0], None, 0.0)
        with pytest.raises(InvalidNodeIndexError):
            tree.add_node([1.0, 0.0], 3, 1.0)


class TestQueries:

    def test_nearest(self, chain_tree):
        assert chain_tree.nearest(np.array([5.0, 7.0])) == 2
        assert chain_tree.nearest(np.array([-1.0, 9.0])) == 3

    def test_nearest_tie_lowest_index(self):
        tree = TreeStore()
        tree.add_node([0.0, 0.0], None, 0.0)
        tree.add_node([2.0, 0.0], 0, 2.0)
        assert tree.nearest(np.array([1.0, 0.0])) == 0

    def test_near_is_strict(self, chain_tree):
        assert chain_tree.near(np.array([0.0, 0.0]), 5.0) == [0]
        assert chain_tree.near(np.array([0.0, 0.0]), 5.0001) == [0, 1]

    def test_children(self, chain_tree):
        assert chain_tree.children(0) == [1, 3]
        assert chain_tree.children(2) == []

    def test_edges(self, chain_tree):
        edges = list(chain_tree.edges())
        assert len(edges) == 3
        np.testing.assert_array_almost_equal(edges[0][0], [0.0, 0.0])
        np.testing.assert_array_almost_equal(edges[0][1], [3.0, 4.0])

    def test_views_are_read_only(self, chain_tree):
        assert chain_tree.positions.shape == (4, 2)
        with pytest.raises(ValueError):
            chain_tree.costs[0] = 1.0

    def test_position_returns_copy(self, chain_tree):
        p = chain_tree.position(1)
        p[0] = 99.0
        assert chain_tree.position(1)[0] == pytest.approx(3.0)


class TestExtractPath:

    def test_path_order(self, chain_tree):
        path = chain_tree.extract_path(2)
        assert len(path) == 3
        np.testing.assert_array_almost_equal(path[0], [0.0, 0.0])
        np.testing.assert_array_almost_equal(path[-1], [6.0, 8.0])

    def test_root_path(self, chain_tree):
        path = chain_tree.extract_path(0)
        assert len(path) == 1

    @pytest.mark.parametrize("index", [4, -1, 100])
    def test_invalid_index(self, chain_tree, index):
        with pytest.raises(InvalidNodeIndexError):
            chain_tree.extract_path(index)

    def test_invalid_index_is_index_error(self, chain_tree):
        with pytest.raises(IndexError):
            chain_tree.cost(7)


class TestRewire:

    def test_rewire_overwrites_parent_and_cost(self, chain_tree):
        # 2(6,8) 改挂到 3(0,10): 10 + sqrt(36 + 4)
        new_cost = 10.0 + math.sqrt(40.0)
        chain_tree.rewire(2, 3, new_cost)
        assert chain_tree.parent(2) == 3
        assert chain_tree.cost(2) == pytest.approx(new_cost)
        path = chain_tree.extract_path(2)
        np.testing.assert_array_almost_equal(path[1], [0.0, 10.0])

    def test_rewire_leaves_descendants_stale(self, chain_tree):
        chain_tree.rewire(1, 0, 4.0)
        assert chain_tree.cost(2) == pytest.approx(10.0)

    def test_propagate_costs(self, chain_tree):
        chain_tree.rewire(1, 0, 4.0)
        n = chain_tree.propagate_costs(1)
        assert n == 1
        assert chain_tree.cost(2) == pytest.approx(4.0 + 5.0)

    def test_propagate_reaches_all_depths(self):
        tree = TreeStore()
        tree.add_node([0.0, 0.0], None, 0.0)
        for i in range(1, 6):
            tree.add_node([float(i), 0.0], i - 1, float(i) + 10.0)
        assert tree.propagate_costs(0) == 5
        for i in range(6):
            assert tree.cost(i) == pytest.approx(float(i))
