"""
unit tests for fleet_params.py and fleet_report.py
"""

import os
import json
import shutil
import tempfile
import unittest
import numpy.testing as npt

from fleet_sizing.queueing.erlang import erlang_tools as e_tools
from fleet_sizing.queueing.fleet import fleet_optimizer as f_opt
from fleet_sizing.queueing.fleet import fleet_report as f_rep
from fleet_sizing.queueing.fleet.fleet_params import FleetParameters
from fleet_sizing.queueing.fleet.fleet_records import SLA, CostModel


class TestFleetParameters(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_defaults(self):
        p = FleetParameters()
        npt.assert_almost_equal(p.service_time, 0.05, decimal=12)
        npt.assert_almost_equal(p.total_traffic, 5.0, decimal=12)
        self.assertEqual(p.sla(), SLA(max_wait_ms=200.0, max_prob_delay_pct=10.0))
        self.assertEqual(p.cost_model(), CostModel(cost_per_worker=10.0, server_overhead=10.0))
        self.assertEqual(p.effective_servers(), 3)
        self.assertTrue(p.err_checks())

    def test_auto_utilization(self):
        p = FleetParameters(auto_utilization=True, target_utilization=75.0)
        self.assertEqual(p.effective_servers(), 2)
        p = FleetParameters(auto_utilization=True, target_utilization=20.0)
        self.assertEqual(p.effective_servers(), 5)

    def test_err_checks(self):
        for kwargs in [{'num_servers': 0}, {'workers_per_server': -1}, {'arrival_rate': -5.0},
                       {'target_utilization': 120.0}, {'max_prob_delay_pct': 101.0},
                       {'opt_min_workers': 10, 'opt_max_workers': 5}, {'min_servers': 5, 'max_servers': 2}]:
            with self.assertLogs('fleet_sizing', level='ERROR'):
                self.assertFalse(FleetParameters(**kwargs).err_checks(), 'err_checks failure for ' + str(kwargs))
        self.assertTrue(FleetParameters(max_wait_ms=None, max_prob_delay_pct=None).err_checks())

    def test_dict(self):
        p = FleetParameters(arrival_rate=250.0, workers_per_server=8, opt_max_workers=40)
        self.assertEqual(FleetParameters.from_dict(p.to_dict()), p)
        with self.assertLogs('fleet_sizing', level='WARNING'):
            q = FleetParameters.from_dict({'arrival_rate': 20.0, 'colour': 'blue'})
        self.assertEqual(q.arrival_rate, 20.0)
        self.assertEqual(q.num_servers, 3)

    def test_json(self):
        cfg_file = os.path.join(self.tmp_dir, 'fleet_cfg.json')
        with open(cfg_file, 'w') as fp:
            json.dump({'arrival_rate': 400, 'service_time_ms': 20, 'max_wait_ms': None}, fp)
        p = FleetParameters.from_json(cfg_file)
        self.assertEqual(p.arrival_rate, 400)
        npt.assert_almost_equal(p.service_time, 0.02, decimal=12)
        self.assertIsNone(p.sla().max_wait_ms)
        self.assertEqual(p.sla().max_prob_delay_pct, 10.0)

    def test_snapshot(self):
        p = FleetParameters()
        s1, s2 = p.snapshot('baseline'), p.snapshot('baseline')
        for k in ['id', 'name', 'timestamp'] + list(p.to_dict().keys()):
            self.assertIn(k, s1)
        self.assertEqual(s1['name'], 'baseline')
        self.assertEqual(s1['arrival_rate'], 100.0)
        self.assertNotEqual(s1['id'], s2['id'])


class TestFleetReport(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_analyze(self):
        d_out = f_rep.analyze(FleetParameters())
        self.assertEqual(d_out['servers'], 3)
        self.assertTrue(d_out['metrics'].meets_sla)
        self.assertEqual(d_out['current'].min_servers, 3)
        self.assertTrue(len(d_out['chain']) > 0)
        self.assertEqual([p.workers for p in d_out['series']], list(range(2, 11)))
        self.assertEqual(set(d_out['best'].keys()), set(f_opt.OBJECTIVES))
        for cfg in d_out['best'].values():
            self.assertIsNotNone(cfg)

    def test_min_workers(self):
        # 33.3 req/sec per server at 50 msecs: 2 workers wait 114 msecs, under the 200 msecs SLA
        d_out = f_rep.analyze(FleetParameters(), objectives=['cost_min'])
        self.assertEqual(d_out['min_workers'], 2)
        lbda = d_out['metrics'].config.lbda_per_server
        self.assertEqual(d_out['min_workers'], e_tools.min_workers(lbda, 0.05, 0.2))
        d_out = f_rep.analyze(FleetParameters(max_wait_ms=20.0), objectives=['cost_min'])
        self.assertEqual(d_out['min_workers'], 3)
        d_out = f_rep.analyze(FleetParameters(max_wait_ms=None), objectives=['cost_min'])
        self.assertIsNone(d_out['min_workers'])

    def test_current_with_chain_bounds(self):
        # the configured workers are kept in the chain even outside its bounds
        p = FleetParameters(opt_min_workers=10, opt_max_workers=12)
        d_out = f_rep.analyze(p, objectives=['cost_min'])
        self.assertEqual(d_out['current'].workers_per_server, 5)
        self.assertEqual(d_out['current'].min_servers, 3)

    def test_invalid(self):
        with self.assertLogs('fleet_sizing', level='ERROR'):
            self.assertIsNone(f_rep.analyze(FleetParameters(num_servers=0)))

    def test_frames(self):
        chain = f_opt.optimization_chain(100.0, 0.05, SLA(200.0, 10.0), CostModel(), 5)
        df = f_rep.chain_frame(chain)
        self.assertEqual(len(df), len(chain))
        self.assertEqual(list(df.columns)[:3], ['workers_per_server', 'max_feasible_util', 'min_servers'])
        self.assertEqual(len(f_rep.chain_frame([])), 0)
        scored = f_opt.score_configurations(100.0, 0.05, SLA(200.0, 10.0), CostModel(), 4, 8)
        df = f_rep.scores_frame(scored)
        self.assertEqual(len(df), len(scored))
        self.assertTrue(df['score'].is_monotonic_decreasing)

    def test_main(self):
        cfg_file = os.path.join(self.tmp_dir, 'fleet_cfg.json')
        out_file = os.path.join(self.tmp_dir, 'chain.csv')
        with open(cfg_file, 'w') as fp:
            json.dump(FleetParameters(arrival_rate=50.0).to_dict(), fp)
        with self.assertLogs('fleet_sizing', level='INFO'):
            d_out = f_rep.main(cfg_file, out_file=out_file)
        self.assertIsNotNone(d_out)
        self.assertTrue(os.path.exists(out_file))


if __name__ == '__main__':
    unittest.main()
