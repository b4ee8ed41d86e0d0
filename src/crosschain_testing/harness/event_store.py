from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Union

from ..models.messaging import DeliveryEvent


class JsonlEventStore:
    """Append-only JSON Lines log with one record per delivery attempt.

    Records are never rewritten; ``read_all`` replays the file from the top.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        parent = self.path.parent
        if str(parent):
            os.makedirs(parent, exist_ok=True)

    def append(self, event: DeliveryEvent) -> None:
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(event.to_record(), sort_keys=True) + "\n")

    def read_all(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        records: List[Dict[str, Any]] = []
        with open(self.path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    records.append(json.loads(line))
        return records

    def __len__(self) -> int:
        return len(self.read_all())
