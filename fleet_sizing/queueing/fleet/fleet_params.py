"""
Fleet parameters: the input snapshot of a fleet sizing run.
$ cat fleet_cfg.json
{"arrival_rate": 100, "service_time_ms": 50, "num_servers": 3, "workers_per_server": 5,
 "target_utilization": 75, "auto_utilization": false, "max_wait_ms": 200, "max_prob_delay_pct": 10,
 "server_overhead": 10, "cost_per_worker": 10, "opt_min_workers": null, "opt_max_workers": null}
Missing keys take the defaults below.
"""

import json
import uuid
from dataclasses import dataclass, asdict, fields
from datetime import datetime, timezone
from typing import Optional

import numpy as np

from fleet_sizing.queueing.erlang import erlang_c as e_c
from fleet_sizing.queueing.fleet import fleet_optimizer as f_opt
from fleet_sizing.queueing.fleet.fleet_records import SLA, CostModel
from fleet_sizing.utilities import sys_utils as s_ut


@dataclass(frozen=True)
class FleetParameters:
    """Inputs of the fleet tool.

    Attributes:
        arrival_rate: total arrival rate (requests/sec).
        service_time_ms: avg service time (msecs).
        num_servers: configured servers.
        workers_per_server: configured workers per server.
        target_utilization: percent, used when auto_utilization is set.
        auto_utilization: derive the servers from target_utilization.
        max_wait_ms: SLA on the avg wait (msecs). None: no constraint.
        max_prob_delay_pct: SLA on P(wait > 0) (percent). None: no constraint.
        server_overhead: cost per server.
        cost_per_worker: cost per worker.
        opt_min_workers: optimization chain lwr bound on workers. None: automatic.
        opt_max_workers: optimization chain upr bound on workers. None: automatic.
        min_servers, max_servers: scorer search bounds on servers.
        min_workers, max_workers: scorer search bounds on workers per server.
    """
    arrival_rate: float = 100.0
    service_time_ms: float = 50.0
    num_servers: int = 3
    workers_per_server: int = 5
    target_utilization: float = 75.0
    auto_utilization: bool = False
    max_wait_ms: Optional[float] = 200.0
    max_prob_delay_pct: Optional[float] = 10.0
    server_overhead: float = 10.0
    cost_per_worker: float = 10.0
    opt_min_workers: Optional[int] = None
    opt_max_workers: Optional[int] = None
    min_servers: int = 1
    max_servers: int = 20
    min_workers: int = 1
    max_workers: int = 50

    @property
    def service_time(self):   # secs
        return self.service_time_ms / 1000.0

    @property
    def total_traffic(self):
        return e_c.offered_traffic(self.arrival_rate, self.service_time)

    def sla(self):
        return SLA(max_wait_ms=self.max_wait_ms, max_prob_delay_pct=self.max_prob_delay_pct)

    def cost_model(self):
        return CostModel(cost_per_worker=self.cost_per_worker, server_overhead=self.server_overhead)

    def effective_servers(self):
        # with auto utilization, fewest servers at or below the target utilization
        if self.auto_utilization:
            n = f_opt.servers_for_utilization(self.total_traffic, self.workers_per_server, self.target_utilization)
            if n is not None:
                return n
        return self.num_servers

    def err_checks(self, verbose=True):
        """
        bounds checker
        :return: True if all values are valid, False otherwise
        """
        checks = [
            ('arrival_rate', self.arrival_rate, lambda x: np.isfinite(x) and x >= 0),
            ('service_time_ms', self.service_time_ms, lambda x: np.isfinite(x) and x >= 0),
            ('num_servers', self.num_servers, lambda x: x >= 1),
            ('workers_per_server', self.workers_per_server, lambda x: x >= 1),
            ('target_utilization', self.target_utilization, lambda x: 0 < x <= 100),
            ('max_wait_ms', self.max_wait_ms, lambda x: x is None or x >= 0),
            ('max_prob_delay_pct', self.max_prob_delay_pct, lambda x: x is None or 0 <= x <= 100),
            ('server_overhead', self.server_overhead, lambda x: x >= 0),
            ('cost_per_worker', self.cost_per_worker, lambda x: x >= 0),
            ('opt_min_workers', self.opt_min_workers, lambda x: x is None or x >= 1),
            ('opt_max_workers', self.opt_max_workers, lambda x: x is None or x >= 1),
            ('min_servers', self.min_servers, lambda x: x >= 1),
            ('max_servers', self.max_servers, lambda x: x >= self.min_servers),
            ('min_workers', self.min_workers, lambda x: x >= 1),
            ('max_workers', self.max_workers, lambda x: x >= self.min_workers),
        ]
        ret = True
        for name, val, is_ok in checks:
            if not is_ok(val):
                if verbose:
                    s_ut.my_print('ERROR_: FleetParameters: invalid parameters. ' + name + ': ' + str(val))
                ret = False
        if self.opt_min_workers is not None and self.opt_max_workers is not None:
            if self.opt_min_workers > self.opt_max_workers:
                if verbose:
                    s_ut.my_print('ERROR_: FleetParameters: invalid parameters. opt_min_workers: ' +
                                  str(self.opt_min_workers) + ' opt_max_workers: ' + str(self.opt_max_workers))
                ret = False
        return ret

    def to_dict(self):
        return asdict(self)

    def snapshot(self, name):
        # a named, time stamped copy of the parameters
        d = {'id': uuid.uuid4().hex, 'name': name, 'timestamp': datetime.now(timezone.utc).isoformat()}
        d.update(self.to_dict())
        return d

    @classmethod
    def from_dict(cls, d_cfg):
        names = {f.name for f in fields(cls)}
        unknown = [k for k in d_cfg if k not in names]
        if len(unknown) > 0:
            s_ut.my_print('WARNING: FleetParameters: ignoring unknown keys: ' + str(unknown))
        return cls(**{k: v for k, v in d_cfg.items() if k in names})

    @classmethod
    def from_json(cls, cfg_file):
        with open(cfg_file, 'r') as fp:
            d_cfg = json.load(fp)
        return cls.from_dict(d_cfg)

    def __str__(self):
        return 'lbda: ' + str(self.arrival_rate) + ' svc_time(ms): ' + str(self.service_time_ms) + \
               ' servers: ' + str(self.effective_servers()) + ' workers: ' + str(self.workers_per_server) + \
               ' ' + str(self.sla())
