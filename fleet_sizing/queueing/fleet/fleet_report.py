"""
Fleet sizing report
Usage: $ python -m fleet_sizing.queueing.fleet.fleet_report fleet_cfg.json
Without a config file, the default FleetParameters are used.
Prints the current fleet metrics, the optimization chain and the best fleet for each objective.
The chain is saved to /tmp/fleet_chain.csv
"""

import os
import sys
from dataclasses import asdict

import pandas as pd

from fleet_sizing.queueing.erlang import erlang_series as e_s
from fleet_sizing.queueing.erlang import erlang_tools as e_tools
from fleet_sizing.queueing.fleet import fleet_optimizer as f_opt
from fleet_sizing.queueing.fleet.fleet_params import FleetParameters
from fleet_sizing.utilities import sys_utils as s_ut


def analyze(params, objectives=f_opt.OBJECTIVES):
    """
    full fleet analysis for a parameter set
    :param params: FleetParameters
    :param objectives: objectives to optimize
    :return: dict or None if the parameters are invalid
      servers: effective servers (auto utilization applied)
      metrics: FleetMetrics of the configured fleet
      series: MetricPoint list for one server of the configured fleet
      min_workers: fewest workers per server meeting the wait SLA at the configured load (None without a wait SLA)
      chain: list of ChainPoint
      current: ChainPoint for the configured workers (None if no utilization target meets the SLA)
      best: dict objective -> best ScoredConfig (None if infeasible)
    """
    if params.err_checks() is False:
        return None
    lbda, svc_time = params.arrival_rate, params.service_time
    sla, cost = params.sla(), params.cost_model()
    n_svrs, workers = params.effective_servers(), params.workers_per_server

    metrics = f_opt.evaluate(lbda, svc_time, n_svrs, workers, sla, cost)
    m_min, m_max = e_s.default_range(metrics.config.traffic_per_server, workers)
    series = e_s.data_points(metrics.config.lbda_per_server, svc_time, m_min, m_max)
    m_workers = None
    if params.max_wait_ms is not None:
        m_workers = e_tools.min_workers(metrics.config.lbda_per_server, svc_time, params.max_wait_ms / 1000.0)
    chain = f_opt.optimization_chain(lbda, svc_time, sla, cost, workers,
                                     min_workers=params.opt_min_workers, max_workers=params.opt_max_workers)
    current = next((p for p in chain if p.workers_per_server == workers), None)
    if current is None:   # chain bounds may exclude the configured workers
        current = f_opt.optimal_for_workers(lbda, svc_time, workers, sla, cost)
    best = dict()
    for obj in objectives:
        best[obj] = f_opt.optimize_fleet(lbda, svc_time, sla, cost, params.max_servers, params.max_workers,
                                         objective=obj, min_servers=params.min_servers,
                                         min_workers=params.min_workers)
    return {'servers': n_svrs, 'metrics': metrics, 'series': series, 'min_workers': m_workers, 'chain': chain,
            'current': current, 'best': best}


def chain_frame(chain):
    cols = ['workers_per_server', 'max_feasible_util', 'min_servers', 'wait_time_ms', 'prob_delay_pct',
            'total_workers', 'total_cost']
    return pd.DataFrame([asdict(p) for p in chain], columns=cols)


def scores_frame(scored):
    cols = ['num_servers', 'workers_per_server', 'total_workers', 'total_cost', 'utilization', 'wait_time_ms',
            'prob_delay_pct', 'traffic_per_server', 'efficiency', 'score']
    return pd.DataFrame([asdict(c) for c in scored], columns=cols)


def main(cfg_file=None, out_file='/tmp/fleet_chain.csv'):
    params = FleetParameters() if cfg_file is None else FleetParameters.from_json(cfg_file)
    s_ut.my_print('fleet parameters: ' + str(params))
    d_out = analyze(params)
    if d_out is None:
        s_ut.my_print('ERROR_: invalid parameters. Cannot analyze')
        return None

    fm = d_out['metrics']
    s_ut.my_print('servers: ' + str(d_out['servers']) + ' stable: ' + str(fm.is_stable) +
                  ' util: ' + str(round(fm.utilization, 2)) + '% wait(ms): ' + str(round(fm.wait_time_ms, 2)) +
                  ' prob delay: ' + str(round(fm.prob_delay_pct, 2)) + '% meets SLA: ' + str(fm.meets_sla) +
                  ' cost: ' + str(fm.total_cost))
    if d_out['min_workers'] is not None:
        s_ut.my_print('min workers per server for the wait SLA: ' + str(d_out['min_workers']))
    if d_out['current'] is not None:
        cp = d_out['current']
        s_ut.my_print('optimal for ' + str(cp.workers_per_server) + ' workers: ' + str(cp.min_servers) +
                      ' servers at ' + str(round(cp.max_feasible_util, 2)) + '% util')
    for obj, cfg in d_out['best'].items():
        if cfg is None:
            s_ut.my_print(obj + ': no feasible fleet')
        else:
            s_ut.my_print(obj + ': servers: ' + str(cfg.num_servers) + ' workers: ' + str(cfg.workers_per_server) +
                          ' cost: ' + str(cfg.total_cost) + ' score: ' + str(round(cfg.score, 4)))

    c_df = chain_frame(d_out['chain'])
    print(c_df.to_string(index=False))
    c_df.to_csv(out_file, index=False)
    s_ut.my_print('chain saved to ' + out_file)
    return d_out


if __name__ == '__main__':
    cfg = os.path.expanduser(sys.argv[1]) if len(sys.argv) > 1 else None
    main(cfg)
