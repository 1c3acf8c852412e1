"""
grid_rrt/path_smoother.py - 路径后处理

贪心最远可视 shortcut：从当前锚点出发，自路径末端向前寻找第一个与锚点
直连无碰撞的路径点，将其作为下一个锚点，直到到达终点。
"""

import logging
from typing import List

import numpy as np

from .occupancy import OccupancyMap

logger = logging.getLogger(__name__)


class PathSmoother:
    """路径后处理器

    Args:
        occupancy: 占据地图（线段碰撞检测）

    Example:
        >>> smoother = PathSmoother(occ)
        >>> waypoints = smoother.smooth(result.raw_path)
    """

    def __init__(self, occupancy: OccupancyMap) -> None:
        self.occupancy = occupancy

    def smooth(self, path: List[np.ndarray]) -> List[np.ndarray]:
        """贪心 shortcut

        输出是输入的子序列，保留首尾点，相邻输出点之间均经过线段检测。
        最坏 O(n^2) 次线段检测。

        Args:
            path: 原始路径点列表

        Returns:
            精简后的路径
        """
        if len(path) <= 1:
            return [np.asarray(p, dtype=np.float64).copy() for p in path]

        last = len(path) - 1
        smoothed = [np.asarray(path[0], dtype=np.float64).copy()]
        anchor = 0
        while anchor < last:
            nxt = None
            for j in range(last, anchor, -1):
                if self.occupancy.segment_free(path[anchor], path[j]):
                    nxt = j
                    break
            if nxt is None:
                # 树边在浮点误差下复检失败，退回到相邻点
                logger.warning("路径段 %d → %d 复检未通过，保留原始相邻段",
                               anchor, anchor + 1)
                nxt = anchor + 1
            smoothed.append(np.asarray(path[nxt], dtype=np.float64).copy())
            anchor = nxt

        if len(smoothed) < len(path):
            logger.info("Shortcut 优化: 路径从 %d → %d 个点",
                        len(path), len(smoothed))
        return smoothed


def compute_path_length(path: List[np.ndarray]) -> float:
    """计算路径总长度 (L2)"""
    if len(path) < 2:
        return 0.0
    return sum(float(np.linalg.norm(np.asarray(path[i]) - np.asarray(path[i - 1])))
               for i in range(1, len(path)))
