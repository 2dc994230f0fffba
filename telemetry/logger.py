from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional, TextIO

from apf_sim.loop import TickReport


class TelemetryLogger:
    """Structured JSONL logger for simulation ticks.

    Append-only, one compact JSON object per line, flushed on every write.
    Use ``on_tick`` as a SimulationLoop observer.
    """

    def __init__(self, path: str, run_id: Optional[str] = None) -> None:
        self.path = path
        self.run_id = run_id
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        self._fp: Optional[TextIO] = open(self.path, "a", encoding="utf-8")

    def log_record(self, record: Dict[str, Any]) -> None:
        """Append a single record to the JSONL file."""
        if self._fp is None:
            return
        if self.run_id is not None:
            record = {"run_id": self.run_id, **record}
        self._fp.write(json.dumps(record, separators=(",", ":")) + "\n")
        self._fp.flush()

    def on_tick(self, report: TickReport) -> None:
        self.log_record(report.to_dict())

    def close(self) -> None:
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def __enter__(self) -> "TelemetryLogger":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
