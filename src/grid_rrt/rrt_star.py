"""
grid_rrt/rrt_star.py - 栅格 RRT* 主规划器

在 OccupancyMap 上增量构建代价最优树：

1. 采样：每 goal_sample_period 次迭代直接采样目标，其余在 [0, extent)^2
   内均匀采样并夹紧；被占据的采样直接丢弃（消耗一次迭代）
2. 最近邻：线性扫描所有节点
3. Steer：朝采样点走 min(step_cap, 距离)，线段碰撞则丢弃
4. 选父节点：半径 r = step_cap * sqrt(ln(n+1)/(n+1)) 内代价最小者
5. 插入新节点并通知渲染回调
6. Rewire：半径内节点若经新节点更便宜则改挂（单层，不传播给后代）
7. 新节点进入目标捕获半径则终止；迭代耗尽则返回 EXHAUSTED
"""

import time
import logging
from typing import Callable, Optional

import numpy as np

from .models import Cell, PlannerConfig, PlannerResult, PlanStatus
from .occupancy import OccupancyMap
from .tree_store import TreeStore
from .path_smoother import PathSmoother, compute_path_length

logger = logging.getLogger(__name__)

EdgeCallback = Callable[[np.ndarray, np.ndarray], None]


class RRTStarPlanner:
    """栅格 RRT* 规划器

    随机数生成器在构造时创建一次；相同 seed、相同输入得到相同的树与路径。

    Args:
        occupancy: 占据地图（只读）
        config: 规划参数配置
        seed: 随机数种子
        rng: 直接注入的随机数生成器（优先于 seed）
        edge_callback: 每插入一个节点后调用 (parent_pos, new_pos)，
            仅用于可视化，返回值被忽略

    Example:
        >>> occ = OccupancyMap(5)
        >>> planner = RRTStarPlanner(occ, seed=42)
        >>> result = planner.plan((0, 0), (4, 4))
        >>> if result.success:
        ...     print(f"路径长度: {result.path_length:.4f}")
    """

    def __init__(
        self,
        occupancy: OccupancyMap,
        config: Optional[PlannerConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        edge_callback: Optional[EdgeCallback] = None,
    ) -> None:
        self.occupancy = occupancy
        self.config = config or PlannerConfig()
        self.config.validate()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.edge_callback = edge_callback
        self.path_smoother = PathSmoother(occupancy)

    def plan(self, start: Cell, goal: Cell) -> PlannerResult:
        """执行路径规划

        Args:
            start: 起点 cell (row, col)
            goal: 终点 cell (row, col)

        Returns:
            PlannerResult 规划结果

        Raises:
            ConfigurationError: 起终点非法
        """
        self.occupancy.validate_endpoints(start, goal)

        t0 = time.time()
        occ = self.occupancy
        cfg = self.config
        checks0 = occ.n_collision_checks

        start_pt = occ.cell_center(start)
        goal_pt = occ.cell_center(goal)
        capture_radius = cfg.capture_ratio * occ.cell_size

        tree = TreeStore()
        tree.add_node(start_pt, None, 0.0)
        result = PlannerResult(tree=tree)

        for iteration in range(cfg.max_iterations):
            result.iterations = iteration + 1
            new_idx = self._extend(tree, iteration, goal_pt)
            if cfg.verbose and (iteration + 1) % 1000 == 0:
                logger.info("迭代 %d: %d 个节点", iteration + 1, len(tree))
            if new_idx is None:
                result.n_discarded += 1
                continue

            d_goal = float(np.linalg.norm(tree.position(new_idx) - goal_pt))
            if d_goal < capture_radius:
                result.status = PlanStatus.PATH_FOUND
                result.goal_index = new_idx
                break

        if result.success:
            result.raw_path = tree.extract_path(result.goal_index)
            result.raw_path_length = compute_path_length(result.raw_path)
            result.path = self.path_smoother.smooth(result.raw_path)
            result.compute_path_length()
            result.message = (
                f"规划成功: 第 {result.iterations} 次迭代到达目标, "
                f"{len(tree)} 个节点, 路径 {len(result.raw_path)} → "
                f"{len(result.path)} 个点, 长度 {result.path_length:.4f}"
            )
            logger.info(result.message)
        else:
            result.message = (
                f"未找到路径: {cfg.max_iterations} 次迭代耗尽, "
                f"{len(tree)} 个节点"
            )
            logger.warning(result.message)

        result.n_collision_checks = occ.n_collision_checks - checks0
        result.computation_time = time.time() - t0
        return result

    # ── 单次迭代 ──

    def _sample(self, iteration: int, goal_pt: np.ndarray) -> np.ndarray:
        period = self.config.goal_sample_period
        if period > 0 and iteration % period == 0:
            return goal_pt.copy()
        extent = self.occupancy.extent
        return self.occupancy.clamp(self.rng.uniform(0.0, extent, size=2))

    def _extend(
        self,
        tree: TreeStore,
        iteration: int,
        goal_pt: np.ndarray,
    ) -> Optional[int]:
        """执行一次采样-steer-选父-插入-rewire，被丢弃时返回 None"""
        occ = self.occupancy
        cfg = self.config

        q_rand = self._sample(iteration, goal_pt)
        if occ.is_blocked(q_rand):
            return None

        idx_near = tree.nearest(q_rand)
        q_near = tree.position(idx_near)
        direction = q_rand - q_near
        dist = float(np.linalg.norm(direction))
        if dist == 0.0:
            return None
        step = min(cfg.step_cap, dist)
        q_new = occ.clamp(q_near + direction * (step / dist))
        if not occ.in_bounds(q_new) or not occ.segment_free(q_near, q_new):
            return None

        # 选父节点
        radius = cfg.neighbor_radius(len(tree))
        near_idxs = tree.near(q_new, radius)
        best_parent = idx_near
        best_cost = tree.cost(idx_near) + float(np.linalg.norm(q_new - q_near))
        for ni in near_idxs:
            q = tree.position(ni)
            c = tree.cost(ni) + float(np.linalg.norm(q_new - q))
            if c < best_cost and occ.segment_free(q, q_new):
                best_parent, best_cost = ni, c

        idx_new = tree.add_node(q_new, best_parent, best_cost)
        if self.edge_callback is not None:
            try:
                self.edge_callback(tree.position(best_parent), q_new.copy())
            except Exception:
                # 渲染回调失败不影响规划
                logger.exception("edge_callback 失败（节点 %d）", idx_new)

        # Rewire
        for ni in near_idxs:
            q = tree.position(ni)
            c_thru = best_cost + float(np.linalg.norm(q - q_new))
            if c_thru < tree.cost(ni) and occ.segment_free(q_new, q):
                tree.rewire(ni, idx_new, c_thru)
                if cfg.propagate_rewire_costs:
                    tree.propagate_costs(ni)
                if cfg.verbose:
                    logger.debug("rewire: 节点 %d → 父节点 %d, 代价 %.4f",
                                 ni, idx_new, c_thru)

        return idx_new
