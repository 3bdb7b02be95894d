# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Minimal JSONL event log for local script executions."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union


class EventClient:
    """Appends one JSON object per line. A None path disables logging."""

    def __init__(self, log_path: Optional[Union[str, Path]]):
        self.log_path = Path(log_path).expanduser() if log_path else None
        if self.log_path is not None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def enabled(self) -> bool:
        return self.log_path is not None

    def log_event(
        self,
        event_type: str,
        correlation_id: str,
        status: str,
        payload: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """Log an event to the JSONL file."""
        if self.log_path is None:
            return

        event = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "correlation_id": correlation_id,
            "status": status,
        }
        if payload:
            event["payload"] = payload
        if error_message:
            event["error_message"] = error_message

        with open(self.log_path, "a") as f:
            f.write(json.dumps(event, default=str) + "\n")
