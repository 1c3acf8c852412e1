#!/usr/bin/env python
"""
examples/grid_planner_demo.py - 栅格 RRT* 规划演示

随机生成（或从 JSON 加载）障碍物栅格，运行 RRT* 规划，打印结果摘要，
并可选绘制探索树与平滑路径。

运行：
    python examples/grid_planner_demo.py
    python examples/grid_planner_demo.py --grid-size 10 --n-obs 20 --seed 7
    python examples/grid_planner_demo.py --scene-json path/to/scene.json
    python examples/grid_planner_demo.py --save-scene scene.json --save-fig rrt.png
"""

from __future__ import annotations

import argparse
import logging
import time
from typing import Tuple

import numpy as np

from grid_rrt import (
    EditorSession,
    PlannerConfig,
    RRTStarPlanner,
)
from grid_rrt.viz import TreeEdgeRecorder, plot_result

# ── 日志配置 ──────────────────────────────────────────────
LOG_FMT = "[%(asctime)s] %(levelname)-7s %(name)s: %(message)s"
logging.basicConfig(level=logging.INFO, format=LOG_FMT, datefmt="%H:%M:%S")
logger = logging.getLogger("grid_planner_demo")


def _parse_cell(text: str) -> Tuple[int, int]:
    row, col = text.split(",")
    return int(row), int(col)


def random_session(
    grid_size: int,
    n_obstacles: int,
    start: Tuple[int, int],
    goal: Tuple[int, int],
    rng: np.random.Generator,
) -> EditorSession:
    """随机放置障碍物（避开起终点）"""
    session = EditorSession(grid_size)
    session.set_start(start)
    session.set_goal(goal)
    free = [(r, c) for r in range(grid_size) for c in range(grid_size)
            if (r, c) not in (start, goal)]
    n = min(n_obstacles, len(free))
    for k in rng.choice(len(free), size=n, replace=False):
        session.toggle_obstacle(free[int(k)])
    return session


def main():
    parser = argparse.ArgumentParser(description="栅格 RRT* 规划演示")
    parser.add_argument("--seed", type=int, default=None,
                        help="随机种子 (默认: 随机)")
    parser.add_argument("--grid-size", type=int, default=10,
                        help="栅格边长 (默认: 10)")
    parser.add_argument("--n-obs", type=int, default=15,
                        help="随机障碍物数量 (默认: 15)")
    parser.add_argument("--start", type=_parse_cell, default=None,
                        help="起点 cell 'row,col' (默认: 左上角)")
    parser.add_argument("--goal", type=_parse_cell, default=None,
                        help="终点 cell 'row,col' (默认: 右下角)")
    parser.add_argument("--scene-json", type=str, default=None,
                        help="加载已有场景 JSON (跳过随机生成)")
    parser.add_argument("--config-json", type=str, default=None,
                        help="加载 PlannerConfig JSON")
    parser.add_argument("--max-iter", type=int, default=None,
                        help="最大迭代数 (默认: 配置值)")
    parser.add_argument("--propagate", action="store_true",
                        help="rewire 后递归更新后代代价")
    parser.add_argument("--save-scene", type=str, default=None,
                        help="保存场景 JSON")
    parser.add_argument("--save-fig", type=str, default=None,
                        help="保存结果图像")
    parser.add_argument("--no-viz", action="store_true",
                        help="跳过可视化")
    args = parser.parse_args()

    rng_seed = args.seed if args.seed is not None else int(time.time()) % 100000
    logger.info("随机种子: %d", rng_seed)

    if args.scene_json:
        logger.info("从 JSON 加载场景: %s", args.scene_json)
        session = EditorSession.from_json(args.scene_json)
    else:
        n = args.grid_size
        start = args.start or (0, 0)
        goal = args.goal or (n - 1, n - 1)
        session = random_session(n, args.n_obs, start, goal,
                                 np.random.default_rng(rng_seed))
    logger.info("场景: %r", session)

    if args.save_scene:
        logger.info("场景已保存到 %s", session.to_json(args.save_scene))

    config = (PlannerConfig.from_json(args.config_json)
              if args.config_json else PlannerConfig())
    if args.max_iter is not None:
        config.max_iterations = args.max_iter
    if args.propagate:
        config.propagate_rewire_costs = True

    occ = session.validate()
    recorder = TreeEdgeRecorder()
    planner = RRTStarPlanner(occ, config, seed=rng_seed,
                             edge_callback=recorder)
    result = planner.plan(session.start, session.goal)

    print(f"\n{'=' * 50}")
    print(f"规划结果: {'成功' if result.success else '失败'}")
    print(f"信息: {result.message}")
    print(f"迭代次数: {result.iterations} (丢弃 {result.n_discarded})")
    print(f"树节点数: {result.n_nodes} (插入边 {len(recorder)} 条)")
    print(f"碰撞检测次数: {result.n_collision_checks}")
    print(f"计算时间: {result.computation_time:.3f} s")
    if result.success:
        print(f"原始路径: {len(result.raw_path)} 点, "
              f"长度 {result.raw_path_length:.2f}")
        print(f"平滑路径: {len(result.path)} 点, "
              f"长度 {result.path_length:.2f}")
        for p in result.path:
            print(f"  ({p[0]:.2f}, {p[1]:.2f})")
    print(f"{'=' * 50}")

    if args.no_viz:
        return

    import matplotlib
    if args.save_fig:
        matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    fig = plot_result(result, occ, session.start, session.goal)
    if args.save_fig:
        fig.savefig(args.save_fig, dpi=120)
        logger.info("图像已保存到 %s", args.save_fig)
    else:
        plt.show()


if __name__ == "__main__":
    main()
