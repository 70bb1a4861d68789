"""
Erlang C metrics over a range of worker counts, for plotting.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from fleet_sizing.queueing.erlang import erlang_c as e_c


@dataclass(frozen=True)
class MetricPoint:
    """Erlang C metrics for one worker count.

    Attributes:
        workers: number of workers (m).
        prob_delay: P(wait > 0), in [0, 1].
        wait_time: avg wait in queue (secs), inf if unstable.
        queue_length: avg number waiting, inf if unstable.
        utilization: percent, in [0, 100].
        traffic: offered traffic (Erlangs).
    """
    workers: int
    prob_delay: float
    wait_time: float
    queue_length: float
    utilization: float
    traffic: float


def metric_point(m, a, svc_time):
    return MetricPoint(
        workers=m,
        prob_delay=e_c.erlC(m, a),
        wait_time=e_c.avg_wait(m, a, svc_time),
        queue_length=e_c.avg_queue(m, a),
        utilization=e_c.utilization(m, a),
        traffic=a,
    )


def data_points(lbda, svc_time, m_min, m_max):
    """
    one MetricPoint per worker count in [m_min, m_max], ascending
    :param lbda: arrival rate (requests/sec)
    :param svc_time: avg service time (secs)
    :param m_min: first worker count
    :param m_max: last worker count (inclusive)
    :return: list of MetricPoint. Empty if m_min > m_max
    """
    a = e_c.offered_traffic(lbda, svc_time)
    return [metric_point(m, a, svc_time) for m in range(int(m_min), int(m_max) + 1)]


def default_range(a, workers):
    # from the stability floor to twice the traffic, and a few workers past the current value
    m_min = max(1, int(np.ceil(a)))
    m_max = max(int(workers) + 5, int(np.ceil(2.0 * a)))
    return m_min, m_max


def to_frame(points):
    # DF in display units: prob in percent, wait in msecs
    cols = ['workers', 'prob_delay_pct', 'wait_time_ms', 'queue_length', 'utilization', 'traffic']
    df = pd.DataFrame([{
        'workers': p.workers,
        'prob_delay_pct': 100.0 * p.prob_delay,
        'wait_time_ms': 1000.0 * p.wait_time,
        'queue_length': p.queue_length,
        'utilization': p.utilization,
        'traffic': p.traffic
    } for p in points], columns=cols)
    return df
