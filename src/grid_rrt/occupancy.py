"""
grid_rrt/occupancy.py - 栅格占据地图

把 N×N 栅格映射到边长为 extent 的连续平面上，提供点合法性、
点是否落在障碍物内、以及离散化线段碰撞检测三类查询。

构造完成后只读：障碍物集合为 frozenset，占据数组不可写。
"""

import logging
from typing import Iterable, FrozenSet

import numpy as np

from .models import Cell, ConfigurationError

logger = logging.getLogger(__name__)


class OccupancyMap:
    """栅格占据地图

    连续坐标 (x, y) 落在 cell (row, col) = (floor(y / cell_size),
    floor(x / cell_size))。任一轴超出 [0, extent) 的点一律视为被占据。

    Args:
        grid_size: 栅格边长 N (>= 1)
        obstacles: 障碍物 cell 集合 [(row, col), ...]
        extent: 连续平面边长
        segment_samples: 线段检测的采样点数 K，采样参数为 i/K (i=1..K)。
            K 越大越不容易漏掉细障碍/拐角，代价线性增加

    Example:
        >>> occ = OccupancyMap(5, obstacles=[(2, 2)])
        >>> occ.is_blocked(occ.cell_center((2, 2)))
        True
        >>> occ.segment_free(occ.cell_center((0, 0)), occ.cell_center((0, 4)))
        True
    """

    def __init__(
        self,
        grid_size: int,
        obstacles: Iterable[Cell] = (),
        extent: float = 500.0,
        segment_samples: int = 10,
    ) -> None:
        if int(grid_size) < 1:
            raise ConfigurationError(f"栅格尺寸必须 >= 1，得到 {grid_size}")
        if not extent > 0:
            raise ConfigurationError(f"extent 必须为正，得到 {extent}")
        if int(segment_samples) < 1:
            raise ConfigurationError(
                f"segment_samples 必须 >= 1，得到 {segment_samples}")

        self._n = int(grid_size)
        self._extent = float(extent)
        self._cell_size = self._extent / self._n
        self._segment_samples = int(segment_samples)
        # 夹紧上界：严格小于 extent 的最大浮点数
        self._upper = float(np.nextafter(self._extent, 0.0))

        grid = np.zeros((self._n, self._n), dtype=bool)
        cells = set()
        for row, col in obstacles:
            row, col = int(row), int(col)
            if not (0 <= row < self._n and 0 <= col < self._n):
                raise ConfigurationError(
                    f"障碍物 cell ({row}, {col}) 超出 {self._n}x{self._n} 栅格")
            cells.add((row, col))
            grid[row, col] = True
        grid.flags.writeable = False
        self._grid = grid
        self._obstacles: FrozenSet[Cell] = frozenset(cells)

        self.n_collision_checks = 0
        logger.debug("OccupancyMap: %dx%d, extent=%.3f, %d 个障碍物",
                     self._n, self._n, self._extent, len(self._obstacles))

    # ── 属性 ──

    @property
    def grid_size(self) -> int:
        return self._n

    @property
    def extent(self) -> float:
        return self._extent

    @property
    def cell_size(self) -> float:
        return self._cell_size

    @property
    def segment_samples(self) -> int:
        return self._segment_samples

    @property
    def obstacles(self) -> FrozenSet[Cell]:
        return self._obstacles

    @property
    def occupancy(self) -> np.ndarray:
        """只读占据数组 (N, N)，True 为障碍物"""
        return self._grid

    # ── cell 工具 ──

    def cell_of(self, point: np.ndarray) -> Cell:
        """连续点所在的 cell (row, col)，不做越界检查"""
        x, y = float(point[0]), float(point[1])
        return (int(np.floor(y / self._cell_size)),
                int(np.floor(x / self._cell_size)))

    def cell_center(self, cell: Cell) -> np.ndarray:
        """cell 中心的连续坐标 (x, y)"""
        row, col = cell
        return np.array([(col + 0.5) * self._cell_size,
                         (row + 0.5) * self._cell_size], dtype=np.float64)

    def cell_in_bounds(self, cell: Cell) -> bool:
        row, col = cell
        return 0 <= row < self._n and 0 <= col < self._n

    def is_cell_free(self, cell: Cell) -> bool:
        return self.cell_in_bounds(cell) and not self._grid[cell[0], cell[1]]

    def clamp(self, point: np.ndarray) -> np.ndarray:
        """把点夹紧到 [0, extent) 内"""
        return np.clip(np.asarray(point, dtype=np.float64), 0.0, self._upper)

    # ── 点 / 线段查询 ──

    def in_bounds(self, point: np.ndarray) -> bool:
        """两个轴的 cell 索引都在 [0, N) 内"""
        row, col = self.cell_of(point)
        return 0 <= row < self._n and 0 <= col < self._n

    def is_blocked(self, point: np.ndarray) -> bool:
        """越界或落在障碍物 cell 内"""
        row, col = self.cell_of(point)
        if not (0 <= row < self._n and 0 <= col < self._n):
            return True
        return bool(self._grid[row, col])

    def segment_free(self, a: np.ndarray, b: np.ndarray) -> bool:
        """离散化线段碰撞检测

        在 a + (b - a) * i/K (i = 1..K) 处采样，任一采样点越界或被占据
        即判为碰撞。起点 a 本身不采样。这是近似检测：宽度小于采样间隔的
        障碍物或拐角可能被漏掉。

        Returns:
            True 表示无碰撞
        """
        self.n_collision_checks += 1
        a = np.asarray(a, dtype=np.float64)
        b = np.asarray(b, dtype=np.float64)
        t = np.arange(1, self._segment_samples + 1) / self._segment_samples
        pts = a[None, :] + (b - a)[None, :] * t[:, None]
        pts[-1] = b
        cols = np.floor(pts[:, 0] / self._cell_size).astype(np.int64)
        rows = np.floor(pts[:, 1] / self._cell_size).astype(np.int64)
        inside = (rows >= 0) & (rows < self._n) & (cols >= 0) & (cols < self._n)
        if not np.all(inside):
            return False
        return not bool(np.any(self._grid[rows, cols]))

    def validate_endpoints(self, start: Cell, goal: Cell) -> None:
        """检查起终点 cell 合法

        Raises:
            ConfigurationError: 起终点重合、越界或落在障碍物上
        """
        start = (int(start[0]), int(start[1]))
        goal = (int(goal[0]), int(goal[1]))
        for name, cell in (("起点", start), ("终点", goal)):
            if not self.cell_in_bounds(cell):
                raise ConfigurationError(f"{name} {cell} 超出栅格范围")
            if not self.is_cell_free(cell):
                raise ConfigurationError(f"{name} {cell} 位于障碍物内")
        if start == goal:
            raise ConfigurationError(f"起点与终点相同: {start}")

    def __repr__(self) -> str:
        return (f"OccupancyMap(grid_size={self._n}, extent={self._extent}, "
                f"n_obstacles={len(self._obstacles)})")
