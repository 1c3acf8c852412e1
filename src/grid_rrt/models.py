"""
grid_rrt/models.py - 规划器数据模型

定义栅格 RRT* 规划器使用的核心数据结构：PlannerConfig、PlannerResult、
PlanStatus，以及配置/索引相关的异常类型。
"""

import json
import enum
import numpy as np
from pathlib import Path
from typing import List, Dict, Optional, Any, Tuple
from dataclasses import dataclass, field
from datetime import datetime

Cell = Tuple[int, int]  # (row, col)


class ConfigurationError(ValueError):
    """规划输入非法（起终点重合、零尺寸栅格等），在进入主循环前抛出"""


class InvalidNodeIndexError(IndexError):
    """访问了 TreeStore 中不存在的节点索引（程序缺陷）"""


class PlanStatus(enum.Enum):
    """规划终止状态"""
    PATH_FOUND = "path_found"
    EXHAUSTED = "exhausted"


@dataclass
class PlannerConfig:
    """RRT* 规划器参数配置

    Attributes:
        max_iterations: 最大迭代次数（被丢弃的采样同样计数）
        goal_sample_period: 每隔多少次迭代直接采样目标点（<=0 关闭目标偏置）
        step_cap: steer 的最大步长
        capture_ratio: 到达判定半径 = capture_ratio * cell_size
        propagate_rewire_costs: rewire 后是否把代价变化递归传播给后代
        verbose: 是否输出逐迭代调试日志
    """
    max_iterations: int = 10000
    goal_sample_period: int = 5
    step_cap: float = 50.0
    capture_ratio: float = 0.6
    propagate_rewire_costs: bool = False
    verbose: bool = False

    def validate(self) -> None:
        """检查参数合法性

        Raises:
            ConfigurationError: 任一参数越界
        """
        if self.max_iterations < 0:
            raise ConfigurationError(
                f"max_iterations 不能为负: {self.max_iterations}")
        if not self.step_cap > 0:
            raise ConfigurationError(f"step_cap 必须为正: {self.step_cap}")
        if not self.capture_ratio > 0:
            raise ConfigurationError(
                f"capture_ratio 必须为正: {self.capture_ratio}")

    def neighbor_radius(self, tree_size: int) -> float:
        """rewire 邻域半径 r = step_cap * sqrt(ln(n+1) / (n+1))"""
        n1 = tree_size + 1
        return self.step_cap * float(np.sqrt(np.log(n1) / n1))

    # ── JSON 序列化 ──

    def to_dict(self) -> Dict[str, Any]:
        """转为字典"""
        from dataclasses import fields as dc_fields
        return {f.name: getattr(self, f.name) for f in dc_fields(self)}

    def to_json(self, filepath: str | Path) -> str:
        """保存到 JSON 文件

        Returns:
            保存的文件路径字符串
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        return str(filepath)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlannerConfig':
        """从字典创建（忽略未知字段，缺失字段用默认值）"""
        from dataclasses import fields as dc_fields
        valid_fields = {f.name for f in dc_fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    @classmethod
    def from_json(cls, filepath: str | Path) -> 'PlannerConfig':
        """从 JSON 文件加载"""
        filepath = Path(filepath)
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_dict(data)


@dataclass
class PlannerResult:
    """路径规划结果

    Attributes:
        status: 终止状态 PATH_FOUND / EXHAUSTED
        goal_index: 到达目标的节点索引（未找到时为 None）
        raw_path: 树上 start → goal 节点的原始路径
        path: shortcut 后的路径
        tree: 规划过程中构建的 TreeStore
        iterations: 实际执行的迭代次数
        n_discarded: 被丢弃的迭代次数（采样/steer 失败）
        n_collision_checks: 线段碰撞检测调用次数
        path_length: 平滑路径长度
        raw_path_length: 原始路径长度
        computation_time: 总计算时间 (s)
        message: 描述信息
        timestamp: 时间戳
    """
    status: PlanStatus = PlanStatus.EXHAUSTED
    goal_index: Optional[int] = None
    raw_path: List[np.ndarray] = field(default_factory=list)
    path: List[np.ndarray] = field(default_factory=list)
    tree: Any = None  # TreeStore (avoid circular import)
    iterations: int = 0
    n_discarded: int = 0
    n_collision_checks: int = 0
    path_length: float = 0.0
    raw_path_length: float = 0.0
    computation_time: float = 0.0
    message: str = ""
    timestamp: str = field(
        default_factory=lambda: datetime.now().strftime('%Y%m%d_%H%M%S'))

    @property
    def success(self) -> bool:
        return self.status is PlanStatus.PATH_FOUND

    @property
    def n_nodes(self) -> int:
        return 0 if self.tree is None else len(self.tree)

    def compute_path_length(self) -> float:
        """计算平滑路径总长度"""
        from .path_smoother import compute_path_length
        self.path_length = compute_path_length(self.path)
        return self.path_length

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "success": self.success,
            "goal_index": self.goal_index,
            "path": [p.tolist() for p in self.path],
            "n_waypoints": len(self.path),
            "n_raw_waypoints": len(self.raw_path),
            "n_nodes": self.n_nodes,
            "iterations": self.iterations,
            "n_discarded": self.n_discarded,
            "n_collision_checks": self.n_collision_checks,
            "path_length": self.path_length,
            "raw_path_length": self.raw_path_length,
            "computation_time": self.computation_time,
            "message": self.message,
            "timestamp": self.timestamp,
        }
