from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping


@dataclass
class TelemetryService:
    """Appends match events to a JSON Lines file.

    An instance can be registered directly as a match listener.
    """

    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def __call__(self, event: Mapping[str, object]) -> None:
        payload = {k: v for k, v in event.items() if k != "type"}
        self.log(str(event.get("type", "UNKNOWN")), payload)
