"""
################################
# Erlang C: M/M/m/Infinity queue
################################
erlC(m, a)                    prob of waiting
avg_wait(m, a, svc_time)      avg time in queue
avg_queue(m, a)               avg number waiting (excluding servers)
offered_traffic(lbda, svc_time)
utilization(m, a)             in percent
################################
a = lbda * svc_time: offered traffic in Erlangs (avg number of busy workers)
m: number of workers in the server
C(m, a) = (a^m/m!) / (a^m/m! + (1 - a/m) * Sum[a^k/k!, {k, 0, m-1}])
The system is stable only for a < m.
################################
Algorithm (no factorials, no powers)
  term = 1, s = 0
  for k = 1 to m
    s += term
    term *= a / k
  end
  return term / (term + (1 - a/m) * s)
term and s are rescaled together when term gets too big, which leaves the ratio unchanged.
"""

import numpy as np
from functools import lru_cache

from fleet_sizing.queueing.erlang import erlang_utils as e_ut

_BIG = 1.0e250       # rescale threshold for the running terms


@lru_cache(maxsize=None)
def erlC(m, a, use_log=False):
    """
    erlang C formula
    :param m: number of workers
    :param a: offered traffic (lbda * svc_time)
    :param use_log: True, return the log of the prob instead
    :return: probability of queueing. 0 for degenerate inputs (m <= 0 or a < 0), 1 when a >= m
    """
    if use_log is True:
        return e_ut.log_erlC(int(np.round(m)), a)
    m = int(np.round(m))
    if m <= 0 or a < 0:
        return 0.0
    if a >= m:
        return 1.0
    term, t_sum = 1.0, 0.0
    for k in range(1, m + 1):
        t_sum += term             # sum_{j<k} a^j / j!
        term *= a / k             # a^k / k!
        if term > _BIG:
            t_sum /= term
            term = 1.0
    return term / (term + (1.0 - a / m) * t_sum)


def avg_wait(m, a, svc_time):
    """
    avg wait time in queue, in the units of svc_time
    E[W] = C(m, a) * svc_time / (m - a)
    """
    if m <= a:
        return np.inf
    return erlC(m, a) * svc_time / (m - a)


def avg_queue(m, a):
    """
    avg queue length, EXCLUDING requests in service
    E[Q] = a * C(m, a) / (m - a)
    """
    if m <= a:
        return np.inf
    return a * erlC(m, a) / (m - a)


def avg_response(m, a, svc_time):
    # wait + service
    return avg_wait(m, a, svc_time) + svc_time


def offered_traffic(lbda, svc_time):
    # Erlangs. No checks: bad values are caught by the guards above
    return lbda * svc_time


def utilization(m, a):
    # percent of worker capacity in use, capped at 100
    if m == 0:
        return 0.0
    return min(100.0, a / m * 100.0)
