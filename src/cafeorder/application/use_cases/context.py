from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class TraceContext:
    trace_id: str | None
    request_id: str | None

    @classmethod
    def for_job(cls, job_name: str) -> TraceContext:
        """Context for work started outside a request, e.g. a CLI sweep."""
        return cls(trace_id=None, request_id=f"{job_name}-{uuid4().hex[:12]}")
