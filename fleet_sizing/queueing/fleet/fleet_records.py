"""
Value records for fleet sizing.
Units follow the fleet SLA: wait times in msecs, delay probabilities in percent.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class SLA:
    """Upper bounds on the avg wait and on the prob of delay.

    Attributes:
        max_wait_ms: max avg wait in queue (msecs). None: no wait constraint.
        max_prob_delay_pct: max P(wait > 0) (percent). None: no delay constraint.
    """
    max_wait_ms: Optional[float] = None
    max_prob_delay_pct: Optional[float] = None

    def wait_ok(self, wait_ms):
        if not np.isfinite(wait_ms):
            return False
        return self.max_wait_ms is None or wait_ms <= self.max_wait_ms

    def prob_ok(self, prob_pct):
        if not np.isfinite(prob_pct):
            return False
        return self.max_prob_delay_pct is None or prob_pct <= self.max_prob_delay_pct

    def is_met(self, wait_ms, prob_pct):
        return self.wait_ok(wait_ms) and self.prob_ok(prob_pct)


@dataclass(frozen=True)
class CostModel:
    """Linear fleet cost: every worker and every server has a fixed price."""
    cost_per_worker: float = 10.0
    server_overhead: float = 10.0

    def total_cost(self, num_servers, workers_per_server):
        return self.cost_per_worker * num_servers * workers_per_server + self.server_overhead * num_servers


@dataclass(frozen=True)
class FleetConfig:
    """Identical servers sharing the load evenly."""
    num_servers: int
    workers_per_server: int
    lbda_per_server: float
    traffic_per_server: float


@dataclass(frozen=True)
class FleetMetrics:
    """Erlang C metrics of one server in an evenly loaded fleet, checked against the SLA."""
    config: FleetConfig
    is_stable: bool
    utilization: float
    wait_time_ms: float
    prob_delay_pct: float
    meets_wait_sla: bool
    meets_prob_sla: bool
    total_cost: float

    @property
    def meets_sla(self):
        return self.meets_wait_sla and self.meets_prob_sla


@dataclass(frozen=True)
class ChainPoint:
    """Highest feasible utilization (and the server count it implies) for one worker count."""
    workers_per_server: int
    max_feasible_util: float
    min_servers: int
    wait_time_ms: float
    prob_delay_pct: float
    total_workers: int
    total_cost: float


@dataclass(frozen=True)
class ScoredConfig:
    """A feasible (servers, workers) pair ranked by the fleet scorer."""
    num_servers: int
    workers_per_server: int
    total_workers: int
    total_cost: float
    utilization: float
    wait_time_ms: float
    prob_delay_pct: float
    traffic_per_server: float
    efficiency: float
    score: float = 0.0
