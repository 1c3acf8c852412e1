"""
grid_rrt - 栅格地图上的 RRT* 路径规划

在离散化的 2D 障碍物栅格上，用 RRT* 增量构建代价最优树寻找起点到终点的
无碰撞路径，再用贪心最远可视 shortcut 精简路径点。

模块：
1. OccupancyMap   - 只读占据地图，点/线段碰撞查询
2. TreeStore      - 只追加的节点池，父链回溯提取路径
3. RRTStarPlanner - 采样、steer、选父、rewire、终止判定
4. PathSmoother   - 贪心 shortcut 后处理
5. EditorSession  - 无界面的障碍物编辑会话（撤销/重做、场景 JSON）
"""

from .models import (
    Cell,
    ConfigurationError,
    InvalidNodeIndexError,
    PlanStatus,
    PlannerConfig,
    PlannerResult,
)
from .occupancy import OccupancyMap
from .tree_store import TreeStore
from .path_smoother import PathSmoother, compute_path_length
from .rrt_star import RRTStarPlanner
from .editor import EditorSession

__version__ = "1.0.0"
__all__ = [
    # 数据模型
    'Cell',
    'ConfigurationError',
    'InvalidNodeIndexError',
    'PlanStatus',
    'PlannerConfig',
    'PlannerResult',
    # 核心算法
    'OccupancyMap',
    'TreeStore',
    'RRTStarPlanner',
    'PathSmoother',
    'compute_path_length',
    # 编辑器
    'EditorSession',
]
