"""
Run timing and memory monitoring.
"""

import json
import threading
import time
from datetime import datetime
from typing import Dict, List, Optional

import psutil


class PerformanceMonitor:
    """Samples process memory and CPU on a background thread during a stitching run."""

    def __init__(self, sampling_interval: float = 0.5):
        self.sampling_interval = sampling_interval
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.memory_samples: List[float] = []
        self.cpu_samples: List[float] = []
        self.counters: Dict[str, int] = {}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        self.start_time = time.time()
        self.end_time = None
        self.memory_samples = []
        self.cpu_samples = []
        self._stop.clear()
        self._thread = threading.Thread(target=self._monitor_loop, daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=2.0)
        self.end_time = time.time()

    def count(self, name: str, value: int):
        """Record a run counter such as records read or composites written."""
        self.counters[name] = value

    def _monitor_loop(self):
        process = psutil.Process()
        while not self._stop.is_set():
            try:
                self.cpu_samples.append(process.cpu_percent(interval=None))
                self.memory_samples.append(process.memory_info().rss / (1024 * 1024))
            except psutil.NoSuchProcess:
                break
            self._stop.wait(self.sampling_interval)

    @property
    def total_time(self) -> float:
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    def get_report(self) -> Dict:
        """Get comprehensive performance report."""
        return {
            'total_time_seconds': self.total_time,
            'peak_memory_mb': max(self.memory_samples) if self.memory_samples else 0.0,
            'average_cpu_percent': (
                sum(self.cpu_samples) / len(self.cpu_samples) if self.cpu_samples else 0.0
            ),
            'start_time': datetime.fromtimestamp(self.start_time).isoformat() if self.start_time else None,
            'end_time': datetime.fromtimestamp(self.end_time).isoformat() if self.end_time else None,
            'counters': dict(self.counters),
            'system_info': {
                'cpu_count': psutil.cpu_count(),
                'total_memory_mb': psutil.virtual_memory().total / (1024 * 1024),
            },
        }

    def save_report(self, filepath):
        """Save performance report to file."""
        with open(filepath, 'w') as f:
            json.dump(self.get_report(), f, indent=2)


__all__ = [
    'PerformanceMonitor',
]
