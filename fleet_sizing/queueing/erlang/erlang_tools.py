"""
Worker sizing: find the number of workers a single Erlang C server needs to meet a wait time SLA
"""

import numpy as np
from functools import lru_cache

from fleet_sizing.queueing.erlang import erlang_c as e_c
from fleet_sizing.utilities import sys_utils as s_ut


class WorkerSizing(object):
    def __init__(self, lbda, svc_time, max_wait, window=3, max_expansions=3, verbose=False):
        # lbda: arrival rate (requests/sec)
        # svc_time: avg service time (secs)
        # max_wait: SLA on the avg wait in queue (secs). We want avg_wait(m) <= max_wait
        # window: normalized upr bound for workers, i.e. upr bound = window * a
        # max_expansions: how many times the upr bound gets doubled when it does not meet the SLA
        self.lbda = lbda
        self.svc_time = svc_time
        self.max_wait = max_wait
        self.a = e_c.offered_traffic(lbda, svc_time)       # offered traffic
        self.window = window
        self.max_expansions = max_expansions
        self.verbose = verbose
        self.min_mval = 1                                  # smallest stable worker count
        self.m_bounds = None
        self.mval = None
        self.set_bounds()

    def set_bounds(self):
        # stability needs m > a: floor(a) + 1 is ceil(a) for fractional a and a + 1 for integer a
        if not np.isfinite(self.a) or self.a < 0 or np.isnan(self.max_wait):
            s_ut.my_print('ERROR_: worker sizing: invalid parameters::' + self.__str__())
            self.m_bounds = None
            return
        self.min_mval = int(np.floor(self.a)) + 1
        m_max = int(np.ceil(self.window * self.a))
        self.m_bounds = (self.min_mval, max(self.min_mval, m_max))

    @lru_cache(maxsize=None)
    def wait_func(self, m):
        # max_wait - avg_wait(m): if >= 0, we are meeting the SLA. avg_wait is non-increasing in m
        return self.max_wait - e_c.avg_wait(m, self.a, self.svc_time)

    def get_workers(self, ctr=0):
        # smallest m in bounds that meets the SLA. Expand the upr bound if it does not meet it
        if self.m_bounds is None:
            return None
        x_min, x_max = self.m_bounds
        if self.wait_func(x_max) < 0:
            if ctr < self.max_expansions:
                self.m_bounds = (x_min, 2 * x_max)
                if self.verbose:
                    s_ut.my_print('could not meet the SLA at ' + str(x_max) + ' workers. Expanding bounds: ' +
                                  str(self.m_bounds) + ' ctr: ' + str(ctr))
                return self.get_workers(ctr=ctr + 1)
            else:
                s_ut.my_print('WARNING: worker sizing could not meet the SLA after ' + str(ctr) +
                              ' expansions. Returning the best effort value: ' + str(x_max) + ' ' + self.__str__())
                self.mval = x_max
                return self.mval
        self.mval = self.bisect(x_min, x_max)
        return self.mval

    def bisect(self, x_min, x_max):
        # assume x_max meets the SLA. Return the leftmost m in [x_min, x_max] that meets it
        while x_min < x_max:
            x = (x_min + x_max) // 2
            if self.wait_func(x) >= 0:     # x meets SLA so solution is between x_min and x
                x_max = x
            else:                          # x does not meet SLA: solution is between x + 1 and x_max
                x_min = x + 1
        return max(x_min, self.min_mval)

    def __str__(self):
        string = ''
        string += ' lambda: ' + str(self.lbda)
        string += ' svc_time: ' + str(self.svc_time)
        string += ' a: ' + str(self.a)
        string += ' max_wait: ' + str(self.max_wait)
        string += ' window: ' + str(self.window)
        string += ' m_bounds: ' + str(self.m_bounds)
        return string


def min_workers(lbda, svc_time, max_wait, window=3, max_expansions=3, verbose=False):
    """
    smallest number of workers with avg_wait <= max_wait
    :param lbda: arrival rate (requests/sec)
    :param svc_time: avg service time (secs)
    :param max_wait: max avg wait in queue (secs)
    :param window: initial upr bound is window * offered traffic
    :param max_expansions: number of upr bound doublings before giving up
    :param verbose: print bound expansions
    :return: number of workers. Always > offered traffic
    """
    return WorkerSizing(lbda, svc_time, max_wait, window=window, max_expansions=max_expansions,
                        verbose=verbose).get_workers()
