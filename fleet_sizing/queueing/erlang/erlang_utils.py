# ##########################################################
# ############ LOG-SPACE AND REFERENCE ERLANG C ############
# ##########################################################
"""
Erlang C in log space and in arbitrary precision.

Sum_{k=0}^{m-1} a^k/k! = e^a Q(m, a), with Q the regularized upper incomplete gamma function, so
log C(m, a) = log(a^m/m!) - log(a^m/m! + (1 - a/m) e^a Q(m, a))
For a < m, Q(m, a) >= 1/2 (roughly), so nothing underflows even for very large m.
"""

import numpy as np
import scipy.special as sps
from scipy.special import logsumexp as lsexp
import mpmath as mpm    # slow but exact: reference values for large m


def log_erlC(m, a):
    """
    log of the erlang C probability
    :param m: number of servers (workers)
    :param a: offered traffic (Erlangs)
    :return: log P(wait > 0). -inf when the probability is 0, 0 when the system is saturated
    """
    if m <= 0 or a < 0:
        return -np.inf
    if a >= m:
        return 0.0
    if a == 0:
        return -np.inf
    l_top = m * np.log(a) - sps.gammaln(m + 1)            # log(a^m / m!)
    l_sum = a + np.log(sps.gammaincc(m, a))              # log(sum_{k<m} a^k / k!)
    l_den = lsexp([l_top, np.log1p(-a / m) + l_sum])
    return float(l_top - l_den)


def erlC_mp(m, a, dps=50):
    """
    erlang C with the direct formula in arbitrary precision
    :param m: number of servers
    :param a: offered traffic
    :param dps: decimal digits of precision
    :return: P(wait > 0) as a float
    """
    if m <= 0 or a < 0:
        return 0.0
    if a >= m:
        return 1.0
    with mpm.workdps(dps):
        ma = mpm.mpf(a)
        top = mpm.power(ma, m) / mpm.factorial(m)
        t_sum = mpm.fsum(mpm.power(ma, k) / mpm.factorial(k) for k in range(m))
        return float(top / (top + (1 - ma / m) * t_sum))
