"""test/test_models.py - PlannerConfig / PlannerResult 测试"""
import json

import numpy as np
import pytest

from grid_rrt.models import (
    ConfigurationError,
    PlannerConfig,
    PlannerResult,
    PlanStatus,
)


class TestPlannerConfig:

    def test_defaults(self):
        cfg = PlannerConfig()
        assert cfg.max_iterations == 10000
        assert cfg.goal_sample_period == 5
        assert cfg.step_cap == pytest.approx(50.0)
        assert cfg.capture_ratio == pytest.approx(0.6)
        assert cfg.propagate_rewire_costs is False

    def test_json_round_trip(self, tmp_path):
        cfg = PlannerConfig(max_iterations=123, step_cap=12.5,
                            propagate_rewire_costs=True)
        filepath = cfg.to_json(tmp_path / "sub" / "config.json")
        loaded = PlannerConfig.from_json(filepath)
        assert loaded == cfg

    def test_from_dict_ignores_unknown(self):
        cfg = PlannerConfig.from_dict({'max_iterations': 7, 'bogus': 1})
        assert cfg.max_iterations == 7
        assert cfg.goal_sample_period == 5

    def test_json_file_is_plain_dict(self, tmp_path):
        path = tmp_path / "config.json"
        PlannerConfig().to_json(path)
        data = json.loads(path.read_text(encoding='utf-8'))
        assert data['step_cap'] == 50.0

    @pytest.mark.parametrize("kwargs", [
        {'max_iterations': -1},
        {'step_cap': 0.0},
        {'capture_ratio': -0.5},
    ])
    def test_validate_rejects(self, kwargs):
        with pytest.raises(ConfigurationError):
            PlannerConfig(**kwargs).validate()


class TestPlannerResult:

    def test_default_is_exhausted(self):
        r = PlannerResult()
        assert r.status is PlanStatus.EXHAUSTED
        assert r.success is False
        assert r.n_nodes == 0

    def test_success_flag(self):
        r = PlannerResult(status=PlanStatus.PATH_FOUND, goal_index=3)
        assert r.success is True

    def test_compute_path_length(self):
        r = PlannerResult(path=[np.array([0.0, 0.0]), np.array([3.0, 4.0])])
        assert r.compute_path_length() == pytest.approx(5.0)
        assert r.path_length == pytest.approx(5.0)

    def test_compute_path_length_matches_smoother_helper(self):
        from grid_rrt.path_smoother import compute_path_length
        path = [np.array([0.0, 0.0]), np.array([3.0, 4.0]), np.array([3.0, 10.0])]
        r = PlannerResult(path=path, path_length=-1.0)
        assert r.compute_path_length() == compute_path_length(path)
        assert PlannerResult(path=path[:1]).compute_path_length() == 0.0

    def test_to_dict(self):
        r = PlannerResult(status=PlanStatus.PATH_FOUND,
                          path=[np.array([1.0, 2.0]), np.array([3.0, 4.0])])
        d = r.to_dict()
        assert d['status'] == "path_found"
        assert d['n_waypoints'] == 2
        assert d['path'][1] == [3.0, 4.0]
        json.dumps(d)
