"""
grid_rrt/editor.py - 障碍物地图编辑会话

无界面的编辑器状态：栅格尺寸、障碍物集合、起终点、撤销/重做栈。
编辑完成后通过 build_map() 生成只读的 OccupancyMap 交给规划器。
提供场景 JSON 序列化（编辑器状态，不含任何规划器状态）。
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from .models import Cell, ConfigurationError
from .occupancy import OccupancyMap

logger = logging.getLogger(__name__)


class EditorSession:
    """障碍物地图编辑会话

    Example:
        >>> session = EditorSession(grid_size=5)
        >>> session.toggle_obstacle((2, 2))
        True
        >>> session.set_endpoint((0, 0))   # 第一次设置起点
        >>> session.set_endpoint((4, 4))   # 之后设置终点
        >>> occ = session.build_map()
    """

    def __init__(
        self,
        grid_size: int,
        extent: float = 500.0,
        segment_samples: int = 10,
    ) -> None:
        if int(grid_size) < 1:
            raise ConfigurationError(f"栅格尺寸必须 >= 1，得到 {grid_size}")
        self.grid_size = int(grid_size)
        self.extent = float(extent)
        self.segment_samples = int(segment_samples)
        self._obstacles: Set[Cell] = set()
        self._undo: List[Cell] = []
        self._redo: List[Cell] = []
        self.start: Optional[Cell] = None
        self.goal: Optional[Cell] = None
        self._selecting_start = True

    # ── 查询 ──

    @property
    def obstacles(self) -> Set[Cell]:
        return set(self._obstacles)

    @property
    def is_configured(self) -> bool:
        return self.start is not None and self.goal is not None

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def _in_grid(self, cell: Cell) -> bool:
        row, col = cell
        return 0 <= row < self.grid_size and 0 <= col < self.grid_size

    # ── 编辑操作 ──

    def _flip(self, cell: Cell) -> None:
        if cell in self._obstacles:
            self._obstacles.remove(cell)
        else:
            self._obstacles.add(cell)

    def toggle_obstacle(self, cell: Cell) -> bool:
        """切换 cell 的障碍物状态

        起终点所在 cell 与栅格外的 cell 忽略。

        Returns:
            是否发生了切换
        """
        cell = (int(cell[0]), int(cell[1]))
        if not self._in_grid(cell) or cell in (self.start, self.goal):
            return False
        self._flip(cell)
        self._undo.append(cell)
        self._redo.clear()
        return True

    def undo(self) -> bool:
        """撤销最近一次切换，栈空时返回 False"""
        if not self._undo:
            return False
        cell = self._undo.pop()
        self._flip(cell)
        self._redo.append(cell)
        return True

    def redo(self) -> bool:
        """重做最近一次撤销，栈空时返回 False"""
        if not self._redo:
            return False
        cell = self._redo.pop()
        self._flip(cell)
        self._undo.append(cell)
        return True

    def set_start(self, cell: Cell) -> None:
        self.start = (int(cell[0]), int(cell[1]))
        self._selecting_start = False

    def set_goal(self, cell: Cell) -> None:
        self.goal = (int(cell[0]), int(cell[1]))

    def set_endpoint(self, cell: Cell) -> None:
        """第一次调用设置起点，之后的调用都设置终点"""
        cell = (int(cell[0]), int(cell[1]))
        if not self._in_grid(cell):
            return
        if self._selecting_start:
            self.set_start(cell)
        else:
            self.set_goal(cell)

    # ── 生成规划输入 ──

    def build_map(self) -> OccupancyMap:
        """生成只读占据地图"""
        return OccupancyMap(
            self.grid_size,
            obstacles=sorted(self._obstacles),
            extent=self.extent,
            segment_samples=self.segment_samples,
        )

    def validate(self) -> OccupancyMap:
        """检查编辑结果可以交给规划器

        Returns:
            对应的 OccupancyMap

        Raises:
            ConfigurationError: 起终点缺失或非法
        """
        if not self.is_configured:
            raise ConfigurationError("起点和终点必须都已设置")
        occ = self.build_map()
        occ.validate_endpoints(self.start, self.goal)
        return occ

    # ── 序列化 ──

    def to_dict(self) -> Dict[str, Any]:
        return {
            'grid_size': self.grid_size,
            'extent': self.extent,
            'segment_samples': self.segment_samples,
            'obstacles': [list(c) for c in sorted(self._obstacles)],
            'start': list(self.start) if self.start is not None else None,
            'goal': list(self.goal) if self.goal is not None else None,
        }

    def to_json(self, filepath: str | Path) -> str:
        """保存场景到 JSON 文件"""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        return str(filepath)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EditorSession':
        """从字典加载场景（不产生撤销记录）

        Args:
            data: {'grid_size': N, 'obstacles': [[r, c], ...],
                   'start': [r, c], 'goal': [r, c], ...}
        """
        session = cls(
            grid_size=data['grid_size'],
            extent=data.get('extent', 500.0),
            segment_samples=data.get('segment_samples', 10),
        )
        for row, col in data.get('obstacles', []):
            cell = (int(row), int(col))
            if not session._in_grid(cell):
                raise ConfigurationError(f"障碍物 cell {cell} 超出栅格")
            session._obstacles.add(cell)
        if data.get('start') is not None:
            session.set_start(data['start'])
        if data.get('goal') is not None:
            session.set_goal(data['goal'])
        logger.debug("加载场景: %dx%d, %d 个障碍物",
                     session.grid_size, session.grid_size,
                     len(session._obstacles))
        return session

    @classmethod
    def from_json(cls, filepath: str | Path) -> 'EditorSession':
        """从 JSON 文件加载场景"""
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def __repr__(self) -> str:
        return (f"EditorSession(grid_size={self.grid_size}, "
                f"n_obstacles={len(self._obstacles)}, "
                f"start={self.start}, goal={self.goal})")
