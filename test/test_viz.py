"""
test/test_viz.py - 可视化测试
"""

import pytest
import numpy as np

from grid_rrt.rrt_star import RRTStarPlanner
from grid_rrt.viz import TreeEdgeRecorder, plot_grid, plot_result


def _has_matplotlib():
    try:
        import matplotlib
        return True
    except ImportError:
        return False


class TestTreeEdgeRecorder:

    def test_records_every_insertion(self, block_map):
        recorder = TreeEdgeRecorder()
        result = RRTStarPlanner(block_map, seed=6,
                                edge_callback=recorder).plan((2, 0), (2, 4))
        assert len(recorder) == len(result.tree) - 1
        assert recorder.segments().shape == (len(recorder), 2, 2)

    def test_empty(self):
        assert TreeEdgeRecorder().segments().shape == (0, 2, 2)

    def test_first_edge_starts_at_root(self, open_map):
        recorder = TreeEdgeRecorder()
        RRTStarPlanner(open_map, seed=0, edge_callback=recorder).plan((0, 0), (4, 4))
        np.testing.assert_array_almost_equal(recorder.edges[0][0], [50.0, 50.0])


@pytest.mark.skipif(not _has_matplotlib(), reason="matplotlib 不可用")
class TestPlotting:

    def test_plot_result_success(self, block_map):
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt

        result = RRTStarPlanner(block_map, seed=4).plan((2, 0), (2, 4))
        fig = plot_result(result, block_map, (2, 0), (2, 4))
        assert fig is not None
        plt.close(fig)

    def test_plot_result_failure(self, wall_map):
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt
        from grid_rrt.models import PlannerConfig

        result = RRTStarPlanner(wall_map, PlannerConfig(max_iterations=50),
                                seed=0).plan((0, 2), (4, 2))
        fig = plot_result(result, wall_map, (0, 2), (4, 2))
        assert "未找到路径" in fig.axes[0].get_title()
        plt.close(fig)

    def test_plot_grid_axes(self, corridor_map):
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt

        ax = plot_grid(corridor_map, (0, 2), (4, 2))
        assert ax.get_xlim() == (0.0, 500.0)
        plt.close(ax.figure)
