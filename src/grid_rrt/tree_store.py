"""
grid_rrt/tree_store.py - RRT* 节点存储

只追加的节点池：位置、父节点、累计代价都存放在按容量倍增的 numpy 数组中，
父节点以整数索引链接。对外接口用 None 表示根节点。
"""

import logging
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .models import InvalidNodeIndexError

logger = logging.getLogger(__name__)

_NO_PARENT = -1


class TreeStore:
    """numpy 数组支撑的 RRT* 树

    节点一经加入永不删除，只有 parent / cost 可以被 rewire 覆盖。

    Args:
        capacity: 初始容量（满后倍增）

    Example:
        >>> tree = TreeStore()
        >>> root = tree.add_node([50.0, 50.0], None, 0.0)
        >>> child = tree.add_node([80.0, 90.0], root, 50.0)
        >>> tree.extract_path(child)
        [array([50., 50.]), array([80., 90.])]
    """
    __slots__ = ('_positions', '_parents', '_costs', '_n', '_cap')

    def __init__(self, capacity: int = 1024) -> None:
        self._cap = max(1, int(capacity))
        self._positions = np.empty((self._cap, 2), dtype=np.float64)
        self._parents = np.full(self._cap, _NO_PARENT, dtype=np.int64)
        self._costs = np.zeros(self._cap, dtype=np.float64)
        self._n = 0

    def __len__(self) -> int:
        return self._n

    def _grow(self) -> None:
        self._cap *= 2
        new_p = np.empty((self._cap, 2), dtype=np.float64)
        new_p[:self._n] = self._positions[:self._n]
        self._positions = new_p
        new_par = np.full(self._cap, _NO_PARENT, dtype=np.int64)
        new_par[:self._n] = self._parents[:self._n]
        self._parents = new_par
        new_c = np.zeros(self._cap, dtype=np.float64)
        new_c[:self._n] = self._costs[:self._n]
        self._costs = new_c

    def _check_index(self, index: int) -> int:
        index = int(index)
        if not 0 <= index < self._n:
            raise InvalidNodeIndexError(
                f"节点索引 {index} 越界 (树大小 {self._n})")
        return index

    # ── 写操作 ──

    def add_node(
        self,
        position: np.ndarray,
        parent_index: Optional[int],
        cost: float,
    ) -> int:
        """追加节点

        Args:
            position: 2D 位置
            parent_index: 父节点索引，None 表示根
            cost: 从根出发的累计代价

        Returns:
            新节点索引（等于插入前的树大小）
        """
        if parent_index is not None:
            parent_index = self._check_index(parent_index)
        if self._n >= self._cap:
            self._grow()
        idx = self._n
        self._positions[idx] = position
        self._parents[idx] = _NO_PARENT if parent_index is None else parent_index
        self._costs[idx] = cost
        self._n += 1
        return idx

    def rewire(self, index: int, new_parent_index: int, new_cost: float) -> None:
        """就地改写节点的父节点与代价

        调用方保证 new_cost < cost(index)，且 new_parent_index 不是
        index 的后代；这里不做检查。
        """
        index = self._check_index(index)
        self._parents[index] = self._check_index(new_parent_index)
        self._costs[index] = new_cost

    def propagate_costs(self, index: int) -> int:
        """把 index 的代价变化逐层传播给所有后代

        Returns:
            被更新的后代节点数
        """
        index = self._check_index(index)
        n = self._n
        parents = self._parents[:n]
        frontier = [index]
        n_updated = 0
        while frontier:
            nxt: List[int] = []
            for p in frontier:
                for c in np.flatnonzero(parents == p):
                    c = int(c)
                    d = float(np.linalg.norm(self._positions[c] - self._positions[p]))
                    self._costs[c] = self._costs[p] + d
                    nxt.append(c)
            n_updated += len(nxt)
            frontier = nxt
        return n_updated

    # ── 读操作 ──

    @property
    def positions(self) -> np.ndarray:
        """只读位置视图 (n, 2)"""
        view = self._positions[:self._n]
        view.flags.writeable = False
        return view

    @property
    def costs(self) -> np.ndarray:
        """只读代价视图 (n,)"""
        view = self._costs[:self._n]
        view.flags.writeable = False
        return view

    def position(self, index: int) -> np.ndarray:
        return self._positions[self._check_index(index)].copy()

    def cost(self, index: int) -> float:
        return float(self._costs[self._check_index(index)])

    def parent(self, index: int) -> Optional[int]:
        p = int(self._parents[self._check_index(index)])
        return None if p == _NO_PARENT else p

    def children(self, index: int) -> List[int]:
        index = self._check_index(index)
        return [int(c) for c in np.flatnonzero(self._parents[:self._n] == index)]

    def nearest(self, point: np.ndarray) -> int:
        """欧氏距离最近的节点（并列时取最小索引）"""
        if self._n == 0:
            raise InvalidNodeIndexError("空树没有最近节点")
        diffs = self._positions[:self._n] - point
        dists = np.sum(diffs * diffs, axis=1)
        return int(np.argmin(dists))

    def near(self, point: np.ndarray, radius: float) -> List[int]:
        """与 point 距离严格小于 radius 的节点索引（升序）"""
        diffs = self._positions[:self._n] - point
        dists = np.sum(diffs * diffs, axis=1)
        return [int(i) for i in np.flatnonzero(dists < radius * radius)]

    def edges(self) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        """遍历 (parent_position, child_position)，供渲染使用"""
        for i in range(self._n):
            p = int(self._parents[i])
            if p != _NO_PARENT:
                yield self._positions[p].copy(), self._positions[i].copy()

    def extract_path(self, index: int) -> List[np.ndarray]:
        """沿父链回溯到根，返回 start → index 的位置序列

        Raises:
            InvalidNodeIndexError: index 越界
        """
        idx = self._check_index(index)
        path = []
        steps = 0
        while idx != _NO_PARENT:
            path.append(self._positions[idx].copy())
            idx = int(self._parents[idx])
            steps += 1
            if steps > self._n:
                raise RuntimeError(f"父链存在环（起点节点 {index}）")
        path.reverse()
        return path

    def __repr__(self) -> str:
        return f"TreeStore(n_nodes={self._n})"
