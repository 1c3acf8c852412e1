"""
grid_rrt/viz.py - 规划结果可视化

绘制栅格、障碍物、起终点、探索树以及原始/平滑路径。
y 轴朝下（row 0 在顶部），与编辑器中栅格的显示方式一致。
"""

import logging
from typing import Any, List, Optional, Tuple

import numpy as np

from .models import Cell, PlannerResult
from .occupancy import OccupancyMap
from .tree_store import TreeStore

logger = logging.getLogger(__name__)

try:
    import matplotlib
    import matplotlib.pyplot as plt
    from matplotlib.patches import Rectangle
    from matplotlib.collections import LineCollection

    matplotlib.rcParams['axes.unicode_minus'] = False
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False


class TreeEdgeRecorder:
    """按插入顺序记录树边的回调，可直接作为 edge_callback 传给规划器

    Example:
        >>> recorder = TreeEdgeRecorder()
        >>> planner = RRTStarPlanner(occ, seed=0, edge_callback=recorder)
        >>> planner.plan((0, 0), (4, 4))
        >>> len(recorder)
    """

    def __init__(self) -> None:
        self.edges: List[Tuple[np.ndarray, np.ndarray]] = []

    def __call__(self, parent_pos: np.ndarray, child_pos: np.ndarray) -> None:
        self.edges.append((np.array(parent_pos, dtype=np.float64),
                           np.array(child_pos, dtype=np.float64)))

    def __len__(self) -> int:
        return len(self.edges)

    def segments(self) -> np.ndarray:
        """(n, 2, 2) 线段数组"""
        if not self.edges:
            return np.zeros((0, 2, 2))
        return np.array([[p, c] for p, c in self.edges])


def plot_grid(
    occupancy: OccupancyMap,
    start: Optional[Cell] = None,
    goal: Optional[Cell] = None,
    ax: Optional[Any] = None,
    figsize: Tuple[float, float] = (7, 7),
) -> Any:
    """绘制栅格线、障碍物和起终点

    Returns:
        matplotlib Axes
    """
    if not HAS_MATPLOTLIB:
        logger.warning("matplotlib 不可用")
        return None

    if ax is None:
        _, ax = plt.subplots(1, 1, figsize=figsize)

    cs = occupancy.cell_size
    extent = occupancy.extent
    for k in range(occupancy.grid_size + 1):
        ax.plot([0, extent], [k * cs, k * cs], color='0.8', linewidth=0.5)
        ax.plot([k * cs, k * cs], [0, extent], color='0.8', linewidth=0.5)

    for row, col in sorted(occupancy.obstacles):
        ax.add_patch(Rectangle((col * cs, row * cs), cs, cs,
                               facecolor='black', edgecolor='black'))

    if start is not None:
        p = occupancy.cell_center(start)
        ax.plot(p[0], p[1], 'o', color='green', markersize=8, label='start')
    if goal is not None:
        p = occupancy.cell_center(goal)
        ax.plot(p[0], p[1], 'o', color='red', markersize=8, label='goal')

    ax.set_xlim(0, extent)
    ax.set_ylim(extent, 0)
    ax.set_aspect('equal')
    return ax


def plot_tree(tree: TreeStore, ax: Any, color: str = 'orange',
              linewidth: float = 0.6) -> Any:
    """绘制探索树的所有边"""
    if not HAS_MATPLOTLIB:
        logger.warning("matplotlib 不可用")
        return None
    segs = [[p, c] for p, c in tree.edges()]
    if segs:
        ax.add_collection(LineCollection(segs, colors=color,
                                         linewidths=linewidth))
    return ax


def plot_path(path: List[np.ndarray], ax: Any, color: str = 'blue',
              linewidth: float = 2.0, label: Optional[str] = None) -> Any:
    """绘制路径折线"""
    if not HAS_MATPLOTLIB:
        logger.warning("matplotlib 不可用")
        return None
    if len(path) >= 2:
        arr = np.asarray(path)
        ax.plot(arr[:, 0], arr[:, 1], '-', color=color,
                linewidth=linewidth, label=label)
    return ax


def plot_result(
    result: PlannerResult,
    occupancy: OccupancyMap,
    start: Optional[Cell] = None,
    goal: Optional[Cell] = None,
    show_raw_path: bool = True,
    title: str = "RRT*",
    figsize: Tuple[float, float] = (7, 7),
) -> Any:
    """绘制完整规划结果

    Returns:
        matplotlib figure
    """
    if not HAS_MATPLOTLIB:
        logger.warning("matplotlib 不可用")
        return None

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    plot_grid(occupancy, start, goal, ax=ax)
    if result.tree is not None:
        plot_tree(result.tree, ax)
    if result.success:
        if show_raw_path:
            plot_path(result.raw_path, ax, color='cyan', linewidth=1.0,
                      label='raw')
        plot_path(result.path, ax, color='blue', label='smoothed')
        ax.set_title(f"{title}: {len(result.path)} 个路径点, "
                     f"长度 {result.path_length:.1f}")
    else:
        ax.set_title(f"{title}: 未找到路径")
    ax.legend(loc='upper right', fontsize=8)
    return fig
