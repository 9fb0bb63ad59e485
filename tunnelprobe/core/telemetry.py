"""
Probe telemetry

Collects one record per probe attempt so a debug run can show where the time
went and which strategy won.
"""
from typing import Optional, Iterator
from dataclasses import dataclass
from contextlib import contextmanager
import time


@dataclass
class ProbeRecord:
    """Outcome of a single probe attempt"""
    probe: str
    subject: str
    ok: bool = False
    elapsed: float = 0.0
    detail: str = ""


class Telemetry:
    """Probe telemetry collector"""
    
    def __init__(self):
        self._records: list[ProbeRecord] = []
        self._selected: Optional[str] = None
    
    @contextmanager
    def track(self, probe: str, subject: str) -> Iterator[ProbeRecord]:
        """
        Time a probe attempt.
        
        The caller sets ``ok``/``detail`` on the yielded record; elapsed time
        is filled in and the record stored even if the body raises.
        """
        record = ProbeRecord(probe=probe, subject=subject)
        start = time.monotonic()
        try:
            yield record
        finally:
            record.elapsed = time.monotonic() - start
            self._records.append(record)
    
    def record_selection(self, strategy: str) -> None:
        """Remember which strategy the cascade settled on"""
        self._selected = strategy
    
    @property
    def selected(self) -> Optional[str]:
        return self._selected
    
    def get_records(self) -> list[ProbeRecord]:
        """Get all probe records in attempt order"""
        return self._records.copy()
    
    def clear(self) -> None:
        """Forget all records"""
        self._records.clear()
        self._selected = None


# Global telemetry instance
_telemetry = Telemetry()


def get_telemetry() -> Telemetry:
    """Get global telemetry instance"""
    return _telemetry
