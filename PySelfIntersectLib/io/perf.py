import csv
import threading
import time
from contextlib import contextmanager


class Perf:
    """Nested section timer; per-thread section stacks, shared totals."""

    def __init__(self):
        self.totals_exclusive = {}
        self.totals_inclusive = {}
        self.counts = {}
        self._local = threading.local()
        self._lock = threading.Lock()

    @property
    def _stack(self):
        stack = getattr(self._local, "stack", None)
        if stack is None:
            stack = self._local.stack = []
        return stack

    @contextmanager
    def section(self, label: str):
        frame = {"label": label, "start": time.perf_counter(), "child": 0.0}
        stack = self._stack
        stack.append(frame)
        try:
            yield
        finally:
            dt = time.perf_counter() - frame["start"]
            exclusive = max(0.0, dt - frame["child"])
            stack.pop()
            if stack:
                stack[-1]["child"] += dt
            with self._lock:
                self.totals_exclusive[label] = self.totals_exclusive.get(label, 0.0) + exclusive
                self.totals_inclusive[label] = self.totals_inclusive.get(label, 0.0) + dt
                self.counts[label] = self.counts.get(label, 0) + 1

    def reset(self):
        with self._lock:
            self.totals_exclusive.clear()
            self.totals_inclusive.clear()
            self.counts.clear()

    def write_csv(self, path: str):
        with self._lock:
            rows = [(k, self.totals_exclusive[k], self.totals_inclusive.get(k, 0.0), self.counts.get(k, 0))
                    for k in sorted(self.totals_exclusive)]
        total_exc = sum(r[1] for r in rows)
        with open(path, "w", newline="") as f:
            w = csv.writer(f)
            w.writerow(["key", "exclusive_sec", "inclusive_sec", "count", "avg_ms", "exclusive_percent"])
            for k, tot_exc, tot_inc, cnt in rows:
                avg_ms = (tot_exc / cnt * 1000.0) if cnt > 0 else 0.0
                pct = (tot_exc / total_exc * 100.0) if total_exc > 0 else 0.0
                w.writerow([k, f"{tot_exc:.9f}", f"{tot_inc:.9f}", cnt, f"{avg_ms:.6f}", f"{pct:.4f}"])
            w.writerow(["TOTAL", f"{total_exc:.9f}", "", "", "", "100.00"])


perf = Perf()
