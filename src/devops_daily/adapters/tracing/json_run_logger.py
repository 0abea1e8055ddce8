from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from devops_daily.domain.models import RunTrace
from devops_daily.utils.json_sanitize import json_sanitize


@dataclass(frozen=True, slots=True)
class JsonRunLogger:
    """
    Writes each run trace to <out_dir>/<YYYYmmdd_HHMMSS>_<run_id>.json.
    """
    out_dir: Path

    def log(self, trace: RunTrace) -> Path:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        stamp = trace.started_at.strftime("%Y%m%d_%H%M%S")
        path = self.out_dir / f"{stamp}_{trace.run_id}.json"
        payload = json_sanitize(trace)
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        return path
