"""Fields shared by the structured events of one API call."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Endpoint and model of the call being logged.

    ``extra`` entries are flattened into the event; ``None`` values are
    dropped everywhere.
    """

    endpoint: Optional[str] = None
    model: Optional[str] = None
    request_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        fields = {"endpoint": self.endpoint, "model": self.model, "request_id": self.request_id}
        fields.update(self.extra)
        return {k: v for k, v in fields.items() if v is not None}


__all__ = ["LogContext"]
