import os
import unittest
from unittest.mock import patch

import support  # noqa: F401

from metrics_helper import compute_cost_unit, get_memory_limit_mb, stage_timer


class TestMemoryLimit(unittest.TestCase):
    @patch("metrics_helper.os.path.exists", return_value=False)
    def test_lambda_memory_size_wins(self, _exists):
        env = {"AWS_LAMBDA_FUNCTION_MEMORY_SIZE": "256", "MEMORY_LIMIT_MB": "1024"}
        with patch.dict(os.environ, env, clear=True):
            self.assertEqual(get_memory_limit_mb(), 256)

    @patch("metrics_helper.os.path.exists", return_value=False)
    def test_falls_back_to_memory_limit_mb(self, _exists):
        with patch.dict(os.environ, {"MEMORY_LIMIT_MB": "1024"}, clear=True):
            self.assertEqual(get_memory_limit_mb(), 1024)

    @patch("metrics_helper.os.path.exists", return_value=False)
    def test_unparseable_value_is_skipped(self, _exists):
        env = {"AWS_LAMBDA_FUNCTION_MEMORY_SIZE": "lots", "MEMORY_LIMIT_MB": "512"}
        with patch.dict(os.environ, env, clear=True):
            self.assertEqual(get_memory_limit_mb(), 512)

    @patch("metrics_helper.Path.read_text", return_value="536870912\n")
    @patch("metrics_helper.os.path.exists", return_value=True)
    def test_cgroup_limit_when_env_unset(self, _exists, _read):
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(get_memory_limit_mb(), 512)

    @patch("metrics_helper.Path.read_text", return_value="max\n")
    @patch("metrics_helper.os.path.exists", return_value=True)
    def test_unbounded_cgroup_uses_default(self, _exists, _read):
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(get_memory_limit_mb(default=192), 192)

    @patch("metrics_helper.os.path.exists", return_value=False)
    def test_default_when_nothing_available(self, _exists):
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(get_memory_limit_mb(), 128)


class TestCostAndTimer(unittest.TestCase):
    def test_cost_unit_is_gb_seconds(self):
        self.assertEqual(compute_cost_unit(2000, 512), 1.0)
        self.assertEqual(compute_cost_unit(0, 1024), 0.0)

    @patch("metrics_helper.time.perf_counter", side_effect=[10.0, 10.25])
    def test_stage_timer_reports_milliseconds(self, _counter):
        with stage_timer() as elapsed:
            pass
        self.assertEqual(elapsed(), 250)


if __name__ == "__main__":
    unittest.main()
