"""
Timing Logger Utility
Console timing for request handling and dataset loading
"""

import time
from typing import Optional


def format_duration(duration_ms: float) -> str:
    """Format duration with emoji speed indicator"""
    if duration_ms > 10000:
        return f"🔴 {duration_ms:.2f}ms (VERY SLOW)"
    elif duration_ms > 5000:
        return f"🟠 {duration_ms:.2f}ms (SLOW)"
    elif duration_ms > 2000:
        return f"🟡 {duration_ms:.2f}ms (MEDIUM)"
    elif duration_ms > 500:
        return f"🟢 {duration_ms:.2f}ms (GOOD)"
    else:
        return f"⚡ {duration_ms:.2f}ms (FAST)"


class TimingLogger:
    """Context manager for timing an operation"""

    def __init__(self, operation_name: str, request_id: Optional[str] = None):
        self.operation_name = operation_name
        self.request_id = request_id or "---"
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def start(self):
        """Start timing"""
        self.start_time = time.time()
        print(f"   ⏱️  [{self.request_id}] Starting: {self.operation_name}")

    def stop(self, failed: bool = False) -> float:
        """Stop timing and return duration in ms"""
        if self.start_time is None:
            return 0
        self.duration_ms = (time.time() - self.start_time) * 1000
        if failed:
            print(f"   ❌ [{self.request_id}] {self.operation_name} FAILED after {self.duration_ms:.2f}ms")
        else:
            print(f"   ✓  [{self.request_id}] {self.operation_name}: {format_duration(self.duration_ms)}")
        return self.duration_ms

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop(failed=exc_type is not None)
        return False
