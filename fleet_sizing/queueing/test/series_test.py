"""
unit tests for erlang_series.py
"""

import unittest
import numpy.testing as npt
import numpy as np

from fleet_sizing.queueing.erlang import erlang_c as e_c
from fleet_sizing.queueing.erlang import erlang_series as e_s


class TestDataPoints(unittest.TestCase):
    def test_points(self):
        pts = e_s.data_points(5, 1.0, 3, 12)
        self.assertEqual([p.workers for p in pts], list(range(3, 13)))
        for p in pts:
            self.assertEqual(p.traffic, 5.0)
            if p.workers <= 5:   # unstable
                self.assertEqual(p.prob_delay, 1.0)
                self.assertTrue(np.isinf(p.wait_time))
                self.assertTrue(np.isinf(p.queue_length))
                self.assertEqual(p.utilization, 100.0)
            else:
                npt.assert_almost_equal(p.prob_delay, e_c.erlC(p.workers, 5.0), decimal=12)
                npt.assert_almost_equal(p.wait_time, e_c.avg_wait(p.workers, 5.0, 1.0), decimal=12)
        npt.assert_almost_equal(pts[-3].prob_delay, 0.0361, decimal=4)   # 10 workers

    def test_empty(self):
        self.assertEqual(e_s.data_points(5, 1.0, 8, 7), [])

    def test_default_range(self):
        self.assertEqual(e_s.default_range(5.0, 5), (5, 10))
        self.assertEqual(e_s.default_range(4.2, 3), (5, 9))
        self.assertEqual(e_s.default_range(0.0, 1), (1, 6))

    def test_frame(self):
        pts = e_s.data_points(100, 0.05, 6, 15)
        df = e_s.to_frame(pts)
        self.assertEqual(list(df.columns), ['workers', 'prob_delay_pct', 'wait_time_ms', 'queue_length',
                                            'utilization', 'traffic'])
        self.assertEqual(len(df), 10)
        row = df[df['workers'] == 10].iloc[0]
        npt.assert_almost_equal(row['prob_delay_pct'], 3.61, decimal=2)
        npt.assert_almost_equal(row['wait_time_ms'], 0.361, decimal=3)
        self.assertTrue(df['prob_delay_pct'].is_monotonic_decreasing)


if __name__ == '__main__':
    unittest.main()
