"""
Fleet sizing with Erlang C
A fleet is num_servers identical servers, each an M/M/m queue with workers_per_server workers.
The total arrival rate is split evenly across servers:
  lbda_server = total_lbda / num_servers
  a_server = lbda_server * svc_time
  util = 100 * a_server / workers_per_server
Solving the utilization equation for the servers:
  num_servers = ceil(100 * a_total / (util * workers_per_server))

Optimization chain
  for each candidate worker count w, try target utilizations 95%, 93%, ..., 31%. The first target whose implied
  server count meets the SLA is kept: it is the highest feasible utilization, hence the fewest servers, for w.
  More workers per server means more pooling, which allows higher utilization under the same SLA.

Scorer
  rank every SLA feasible (servers, workers) pair in the search bounds by an objective:
    cost_min:         0.7 * cost_score + 0.3 * util_score
    performance_max:  0.6 * wait_score + 0.4 * util_score
    balanced:         0.4 * cost_score + 0.3 * wait_score + 0.3 * util_score
    efficiency_max:   efficiency / max(efficiency), efficiency = util / (cost / 100)
  with cost_score = 1 - cost / max(cost), wait_score = 1 - wait / max_wait, util_score = util / 100

Infeasible searches return an empty list or None.
"""

from dataclasses import replace

import numpy as np

from fleet_sizing.queueing.erlang import erlang_c as e_c
from fleet_sizing.queueing.erlang import erlang_series as e_s
from fleet_sizing.queueing.fleet.fleet_records import FleetConfig, FleetMetrics, ChainPoint, ScoredConfig
from fleet_sizing.utilities import sys_utils as s_ut

UTIL_TARGETS = range(95, 29, -2)     # 95, 93, ..., 31 (percent)
MAX_SERVERS = 10000                  # larger server counts are skipped
OBJECTIVES = ('cost_min', 'performance_max', 'balanced', 'efficiency_max')


def fleet_config(total_lbda, svc_time, num_servers, workers):
    lbda = total_lbda / num_servers
    return FleetConfig(num_servers=num_servers, workers_per_server=workers,
                       lbda_per_server=lbda, traffic_per_server=e_c.offered_traffic(lbda, svc_time))


def evaluate(total_lbda, svc_time, num_servers, workers, sla, cost):
    """
    metrics of one server in the fleet
    :param total_lbda: total arrival rate (requests/sec)
    :param svc_time: avg service time (secs)
    :param num_servers: number of servers
    :param workers: workers per server
    :param sla: SLA
    :param cost: CostModel
    :return: FleetMetrics or None if servers or workers are not positive
    """
    if num_servers <= 0 or workers <= 0:
        return None
    cfg = fleet_config(total_lbda, svc_time, num_servers, workers)
    a = cfg.traffic_per_server
    wait_ms = 1000.0 * e_c.avg_wait(workers, a, svc_time)
    prob_pct = 100.0 * e_c.erlC(workers, a)
    return FleetMetrics(
        config=cfg,
        is_stable=bool(a < workers),
        utilization=e_c.utilization(workers, a),
        wait_time_ms=wait_ms,
        prob_delay_pct=prob_pct,
        meets_wait_sla=sla.wait_ok(wait_ms),
        meets_prob_sla=sla.prob_ok(prob_pct),
        total_cost=cost.total_cost(num_servers, workers),
    )


def evaluate_servers(total_lbda, svc_time, workers_list):
    """
    servers with possibly different worker counts sharing the load evenly
    :param total_lbda: total arrival rate (requests/sec)
    :param svc_time: avg service time (secs)
    :param workers_list: workers of each server
    :return: list of MetricPoint (one per server), dict of fleet averages (None if there are no servers)
    """
    if len(workers_list) == 0:
        return list(), None
    a = e_c.offered_traffic(total_lbda / len(workers_list), svc_time)
    points = [e_s.metric_point(w, a, svc_time) for w in workers_list]
    summary = {
        'servers': len(points),
        'total_workers': int(np.sum(workers_list)),
        'avg_utilization': float(np.mean([p.utilization for p in points])),
        'avg_wait_time': float(np.mean([p.wait_time for p in points])),
        'avg_prob_delay': float(np.mean([p.prob_delay for p in points]))
    }
    return points, summary


def servers_for_utilization(total_traffic, workers, target_util):
    # fewest servers at or below the target utilization (percent)
    if workers <= 0 or target_util <= 0:
        return None
    return max(1, int(np.ceil(total_traffic * 100.0 / (target_util * workers))))


def chain_workers(workers_per_server, total_traffic, min_workers=None, max_workers=None):
    """
    worker counts to try in the optimization chain
    Large ranges are sampled (about 50 values) but the current value and both endpoints are always there.
    :param workers_per_server: current workers per server
    :param total_traffic: total offered traffic (Erlangs)
    :param min_workers: lwr bound. Default: current - 10
    :param max_workers: upr bound. Default: max(current + 20, total_traffic / 2), at most 200
    :return: sorted list of worker counts
    """
    w_min = max(1, int(min_workers)) if min_workers is not None else max(1, workers_per_server - 10)
    if max_workers is not None:
        w_max = min(1000, max(w_min, int(max_workers)))
    else:
        half_traffic = int(np.ceil(total_traffic / 2.0)) if np.isfinite(total_traffic) else 0
        w_max = min(200, max(workers_per_server + 20, half_traffic))
    w_range = w_max - w_min
    step = max(1, w_range // 50) if w_range > 50 else 1
    w_set = set(range(w_min, w_max + 1, step))
    w_set.update([workers_per_server, w_min, w_max])
    return sorted(w_set)


def optimal_for_workers(total_lbda, svc_time, workers, sla, cost):
    """
    highest utilization target that meets the SLA with workers per server (greedy: the first hit wins)
    :param total_lbda: total arrival rate (requests/sec)
    :param svc_time: avg service time (secs)
    :param workers: workers per server
    :param sla: SLA
    :param cost: CostModel
    :return: ChainPoint or None if no target meets the SLA
    """
    if workers <= 0:
        return None
    a_total = e_c.offered_traffic(total_lbda, svc_time)
    for u in UTIL_TARGETS:
        n = np.ceil(a_total * 100.0 / (u * workers))
        if not np.isfinite(n) or n < 1 or n > MAX_SERVERS:
            continue
        cfg = fleet_config(total_lbda, svc_time, int(n), workers)
        a = cfg.traffic_per_server
        if a >= workers:     # unstable
            continue
        util = e_c.utilization(workers, a)
        wait_ms = 1000.0 * e_c.avg_wait(workers, a, svc_time)
        prob_pct = 100.0 * e_c.erlC(workers, a)
        if not (np.isfinite(util) and np.isfinite(wait_ms) and np.isfinite(prob_pct)):
            continue
        if sla.is_met(wait_ms, prob_pct):
            if util <= 0.0:
                return None
            return ChainPoint(
                workers_per_server=workers,
                max_feasible_util=util,
                min_servers=cfg.num_servers,
                wait_time_ms=wait_ms,
                prob_delay_pct=prob_pct,
                total_workers=workers * cfg.num_servers,
                total_cost=cost.total_cost(cfg.num_servers, workers),
            )
    return None


def optimization_chain(total_lbda, svc_time, sla, cost, workers_per_server, min_workers=None, max_workers=None):
    """
    best (highest utilization, fewest servers) fleet for each candidate worker count
    :return: list of ChainPoint sorted by workers per server. Empty if nothing meets the SLA
    """
    a_total = e_c.offered_traffic(total_lbda, svc_time)
    w_list = chain_workers(workers_per_server, a_total, min_workers=min_workers, max_workers=max_workers)
    chain = list()
    for w in w_list:
        pt = optimal_for_workers(total_lbda, svc_time, w, sla, cost)
        if pt is not None:
            chain.append(pt)
    if len(chain) == 0:
        s_ut.my_print('WARNING: optimization chain: no feasible configuration for workers in [' + str(w_list[0]) +
                      ', ' + str(w_list[-1]) + ']. Relax the SLA: ' + str(sla))
    return chain


def feasible_configurations(total_lbda, svc_time, sla, cost, max_servers, max_workers, min_servers=1, min_workers=1):
    # all (servers, workers) pairs that meet the SLA, servers ascending then workers ascending
    configs = list()
    for n in range(max(1, min_servers), max_servers + 1):
        for w in range(max(1, min_workers), max_workers + 1):
            fm = evaluate(total_lbda, svc_time, n, w, sla, cost)
            if not fm.meets_sla:
                continue
            efficiency = fm.utilization / (fm.total_cost / 100.0) if fm.total_cost > 0 else np.inf
            configs.append(ScoredConfig(
                num_servers=n,
                workers_per_server=w,
                total_workers=n * w,
                total_cost=fm.total_cost,
                utilization=fm.utilization,
                wait_time_ms=fm.wait_time_ms,
                prob_delay_pct=fm.prob_delay_pct,
                traffic_per_server=fm.config.traffic_per_server,
                efficiency=efficiency,
            ))
    return configs


def get_score(cfg, objective, max_cost, max_wait_ms, max_efficiency):
    cost_score = 1.0 - cfg.total_cost / max_cost if max_cost > 0 else 1.0
    wait_score = 1.0 - cfg.wait_time_ms / max_wait_ms if max_wait_ms > 0 else 1.0
    util_score = cfg.utilization / 100.0
    if objective == 'cost_min':
        return 0.7 * cost_score + 0.3 * util_score
    elif objective == 'performance_max':
        return 0.6 * wait_score + 0.4 * util_score
    elif objective == 'balanced':
        return 0.4 * cost_score + 0.3 * wait_score + 0.3 * util_score
    else:   # efficiency_max
        if np.isinf(max_efficiency):   # free configurations
            return 1.0 if np.isinf(cfg.efficiency) else 0.0
        return cfg.efficiency / max_efficiency if max_efficiency > 0 else 0.0


def score_configurations(total_lbda, svc_time, sla, cost, max_servers, max_workers, objective='balanced',
                         min_servers=1, min_workers=1):
    """
    rank the SLA feasible fleets
    :param total_lbda: total arrival rate (requests/sec)
    :param svc_time: avg service time (secs)
    :param sla: SLA. Without a wait bound, the wait score uses the largest wait found
    :param cost: CostModel
    :param max_servers: servers upr bound
    :param max_workers: workers per server upr bound
    :param objective: one of OBJECTIVES
    :param min_servers: servers lwr bound
    :param min_workers: workers per server lwr bound
    :return: list of ScoredConfig by decreasing score, ties in search order. None for an invalid objective
    """
    if objective not in OBJECTIVES:
        s_ut.my_print('ERROR_: invalid objective: ' + str(objective) + ' valid objectives: ' + str(OBJECTIVES))
        return None
    configs = feasible_configurations(total_lbda, svc_time, sla, cost, max_servers, max_workers,
                                      min_servers=min_servers, min_workers=min_workers)
    if len(configs) == 0:
        return list()
    max_cost = max(c.total_cost for c in configs)
    max_wait_ms = sla.max_wait_ms if sla.max_wait_ms is not None else max(c.wait_time_ms for c in configs)
    max_efficiency = max(c.efficiency for c in configs)
    scored = [replace(c, score=get_score(c, objective, max_cost, max_wait_ms, max_efficiency)) for c in configs]
    return sorted(scored, key=lambda c: -c.score)   # stable: first found wins ties


def optimize_fleet(total_lbda, svc_time, sla, cost, max_servers, max_workers, objective='balanced',
                   min_servers=1, min_workers=1):
    """
    best scored fleet
    :return: ScoredConfig or None if no fleet in bounds meets the SLA (or the objective is invalid)
    """
    scored = score_configurations(total_lbda, svc_time, sla, cost, max_servers, max_workers, objective=objective,
                                  min_servers=min_servers, min_workers=min_workers)
    if scored is None:
        return None
    if len(scored) == 0:
        s_ut.my_print('WARNING: optimize fleet: no feasible configuration with up to ' + str(max_servers) +
                      ' servers and ' + str(max_workers) + ' workers per server. Relax the SLA: ' + str(sla))
        return None
    return scored[0]
