"""
Mock multipass info generator.

Produces fake but realistic `multipass info --format=json` documents so we
can develop and test without Multipass installed. Running instances report
usage; stopped/suspended/deleted ones report what the real CLI does for
them (no load, zero used memory, empty cpu_count).
"""

import json
import math
import random
import threading
from typing import Dict, Optional, Sequence

# (name, state, release, cpus, memory total in GiB)
DEFAULT_FLEET = [
    ("primary", "Running", "Ubuntu 24.04 LTS", 2, 4),
    ("k8s-node-1", "Running", "Ubuntu 22.04 LTS", 4, 8),
    ("builder", "Stopped", "Ubuntu 22.04 LTS", 2, 2),
    ("legacy", "Suspended", "Ubuntu 20.04 LTS", 1, 1),
    ("scratch", "Deleted", "Ubuntu 24.04 LTS", 1, 1),
]

GIB = 1024 ** 3


class MockMultipass:

    def __init__(self, seed: int = 42, fleet: Optional[Sequence[tuple]] = None):
        self._rng = random.Random(seed)
        self._tick = 0
        self._fleet = list(fleet if fleet is not None else DEFAULT_FLEET)
        # Request threads of the metrics server share one generator
        self._lock = threading.Lock()

    @property
    def instance_count(self) -> int:
        return len(self._fleet)

    @property
    def tick(self) -> int:
        return self._tick

    def payload(self) -> Dict:
        """Generate one document, advancing the simulation clock."""
        with self._lock:
            self._tick += 1
            info = {}
            for index, (name, state, release, cpus, mem_gib) in enumerate(self._fleet):
                info[name] = self._instance(index, name, state, release, cpus, mem_gib)
        return {"errors": [], "info": info}

    def text(self) -> str:
        return json.dumps(self.payload(), indent=4)

    def _instance(self, index: int, name: str, state: str, release: str,
                  cpus: int, mem_gib: int) -> Dict:
        total = mem_gib * GIB
        entry = {
            "name": name,
            "state": state,
            "release": release,
            "image_hash": f"{self._rng.getrandbits(64):016x}",
            "image_release": release.replace("Ubuntu ", "").replace(" LTS", ""),
            "ipv4": [],
            "load": [],
            "cpu_count": "",
            "memory": {},
            "disks": {"sda1": {}},
            "mounts": {},
        }
        if state != "Running":
            return entry

        # Sinusoidal base load, phase-shifted per instance, with jitter
        base = cpus * (0.35 + 0.25 * math.sin(self._tick * 0.1 + index))
        load_1m = max(0.0, base + self._rng.gauss(0, 0.1))
        load_5m = max(0.0, base * 0.9 + self._rng.gauss(0, 0.05))
        load_15m = max(0.0, base * 0.8 + self._rng.gauss(0, 0.02))

        used_fraction = max(0.05, min(0.95, 0.3 + load_1m / (cpus * 4) + self._rng.gauss(0, 0.02)))
        disk_total = 5 * GIB

        entry.update({
            "ipv4": [f"10.84.12.{10 + index}"],
            "load": [round(load_1m, 2), round(load_5m, 2), round(load_15m, 2)],
            "cpu_count": str(cpus),
            "memory": {"total": total, "used": int(total * used_fraction)},
            "disks": {"sda1": {"total": str(disk_total), "used": str(int(disk_total * 0.4))}},
        })
        return entry
