"""Box self-intersection: report every pair of overlapping face boxes once.

The box set is split recursively at the median box center along alternating
axes into boxes entirely left of the split value, entirely right of it, and
boxes straddling it. Left and right boxes never overlap each other, so the
pairs are the self-pairs of the three groups plus the bipartite pairs between
the straddling group and each side. Groups at or below ``cutoff`` boxes are
handled by a sort-and-sweep scan along x.
"""
import logging
from functools import partial
from typing import Callable, List, Sequence
import numpy as np

from ..core.aabb import FaceBox
from .execution import CancellationToken, SequentialExecution


logger = logging.getLogger(__name__)

DEFAULT_CUTOFF = 2000

PairCallback = Callable[[FaceBox, FaceBox], None]


class _BoxTraversal:
    def __init__(self, boxes: Sequence[FaceBox], callback: PairCallback, cutoff: int,
                 token: CancellationToken):
        self.boxes = boxes
        self.lo = np.array([b.bbox.m_min for b in boxes], float).reshape(-1, 3)
        self.hi = np.array([b.bbox.m_max for b in boxes], float).reshape(-1, 3)
        self.callback = callback
        self.cutoff = max(1, int(cutoff))
        self.token = token

    def _report(self, i: int, j: int) -> bool:
        if self.token.cancelled:
            return False
        self.callback(self.boxes[i], self.boxes[j])
        return not self.token.cancelled

    def _split(self, idx: np.ndarray, axis: int, m: float):
        lo = self.lo[idx, axis]
        hi = self.hi[idx, axis]
        return idx[hi < m], idx[lo > m], idx[(lo <= m) & (hi >= m)]

    def _median_center(self, idx: np.ndarray, axis: int) -> float:
        return float(np.median(0.5 * (self.lo[idx, axis] + self.hi[idx, axis])))

    def self_run(self, idx: np.ndarray, axis: int = 0, stalled: int = 0) -> bool:
        if self.token.cancelled:
            return False
        if len(idx) < 2:
            return True
        if len(idx) <= self.cutoff or stalled >= 3:
            return self._scan_self(idx)
        nxt = (axis + 1) % 3
        left, right, straddle = self._split(idx, axis, self._median_center(idx, axis))
        if len(straddle) == len(idx):
            return self.self_run(idx, nxt, stalled + 1)
        return (self.self_run(left, nxt)
                and self.self_run(right, nxt)
                and self.self_run(straddle, nxt)
                and self.bipartite_run(straddle, left, nxt)
                and self.bipartite_run(straddle, right, nxt))

    def bipartite_run(self, a: np.ndarray, b: np.ndarray, axis: int = 0, stalled: int = 0) -> bool:
        if self.token.cancelled:
            return False
        if len(a) == 0 or len(b) == 0:
            return True
        if len(a) + len(b) <= self.cutoff or stalled >= 3:
            return self._scan_bipartite(a, b)
        nxt = (axis + 1) % 3
        m = self._median_center(np.concatenate([a, b]), axis)
        a_left, a_right, a_straddle = self._split(a, axis, m)
        b_left, b_right, b_straddle = self._split(b, axis, m)
        a_whole = _whole_group(len(a), a_left, a_right, a_straddle)
        b_whole = _whole_group(len(b), b_left, b_right, b_straddle)
        if a_whole is not None and b_whole is not None:
            # neither side splits on this axis
            if {a_whole, b_whole} == {0, 1}:
                return True
            return self.bipartite_run(a, b, nxt, stalled + 1)
        if a_whole == 2:
            return (self.bipartite_run(a, b_left, nxt)
                    and self.bipartite_run(a, b_right, nxt)
                    and self.bipartite_run(a, b_straddle, nxt))
        if b_whole == 2:
            return (self.bipartite_run(a_left, b, nxt)
                    and self.bipartite_run(a_right, b, nxt)
                    and self.bipartite_run(a_straddle, b, nxt))
        # left-of-split never meets right-of-split
        return (self.bipartite_run(a_left, b_left, nxt)
                and self.bipartite_run(a_right, b_right, nxt)
                and self.bipartite_run(a_straddle, b, nxt)
                and self.bipartite_run(a_left, b_straddle, nxt)
                and self.bipartite_run(a_right, b_straddle, nxt))

    def _overlap_yz(self, i: int, cand: np.ndarray) -> np.ndarray:
        lo, hi = self.lo, self.hi
        mask = ((lo[cand, 1] <= hi[i, 1]) & (hi[cand, 1] >= lo[i, 1])
                & (lo[cand, 2] <= hi[i, 2]) & (hi[cand, 2] >= lo[i, 2]))
        return cand[mask]

    def _scan_self(self, idx: np.ndarray) -> bool:
        order = idx[np.argsort(self.lo[idx, 0], kind="stable")]
        lo_x = self.lo[order, 0]
        ends = np.searchsorted(lo_x, self.hi[order, 0], side="right")
        for k in range(len(order)):
            if self.token.cancelled:
                return False
            if ends[k] <= k + 1:
                continue
            i = int(order[k])
            for j in self._overlap_yz(i, order[k + 1:ends[k]]):
                if not self._report(i, int(j)):
                    return False
        return True

    def _scan_bipartite(self, a: np.ndarray, b: np.ndarray) -> bool:
        a = a[np.argsort(self.lo[a, 0], kind="stable")]
        b = b[np.argsort(self.lo[b, 0], kind="stable")]
        a_lo, b_lo = self.lo[a, 0], self.lo[b, 0]
        i = j = 0
        while i < len(a) and j < len(b):
            if self.token.cancelled:
                return False
            if a_lo[i] <= b_lo[j]:
                ai = int(a[i])
                end = np.searchsorted(b_lo, self.hi[ai, 0], side="right")
                for bj in self._overlap_yz(ai, b[j:end]):
                    if not self._report(ai, int(bj)):
                        return False
                i += 1
            else:
                bj = int(b[j])
                end = np.searchsorted(a_lo, self.hi[bj, 0], side="right")
                for ai in self._overlap_yz(bj, a[i:end]):
                    if not self._report(int(ai), bj):
                        return False
                j += 1
        return True


def _whole_group(n: int, *groups: np.ndarray):
    """Index of the group holding all ``n`` boxes (0 left, 1 right, 2 straddle), else None."""
    for k, g in enumerate(groups):
        if len(g) == n:
            return k
    return None


def _parallel_tasks(traversal: _BoxTraversal, idx: np.ndarray, workers: int, random_seed: int) -> List:
    # shuffled so that equal-size chunks carry similar work
    idx = np.random.default_rng(random_seed).permutation(idx)
    k = max(1, min(int(workers), len(idx)))
    chunks = np.array_split(idx, k)
    tasks = [partial(traversal.self_run, c) for c in chunks]
    for i in range(k):
        for j in range(i + 1, k):
            tasks.append(partial(traversal.bipartite_run, chunks[i], chunks[j]))
    return tasks


def box_self_intersection(boxes: Sequence[FaceBox], callback: PairCallback, cutoff: int = DEFAULT_CUTOFF,
                          execution=None, token: CancellationToken | None = None,
                          random_seed: int = 0) -> bool:
    """Invoke ``callback(box_a, box_b)`` once per unordered overlapping pair.

    Returns False when the traversal was stopped through ``token`` before it
    finished, True otherwise.
    """
    execution = execution or SequentialExecution()
    token = token or CancellationToken()
    traversal = _BoxTraversal(boxes, callback, cutoff, token)
    idx = np.arange(len(boxes))
    if execution.workers > 1 and len(boxes) > 1:
        tasks = _parallel_tasks(traversal, idx, execution.workers, random_seed)
    else:
        tasks = [partial(traversal.self_run, idx)]
    logger.debug("box self intersection: %d boxes, %d tasks, cutoff %d", len(boxes), len(tasks), cutoff)
    execution.run(tasks, token)
    return not token.cancelled


def box_intersection(boxes_a: Sequence[FaceBox], boxes_b: Sequence[FaceBox], callback: PairCallback,
                     cutoff: int = DEFAULT_CUTOFF, token: CancellationToken | None = None) -> bool:
    """Bipartite variant: ``callback(a, b)`` for each overlapping ``a`` in ``boxes_a``, ``b`` in ``boxes_b``."""
    token = token or CancellationToken()
    boxes = list(boxes_a) + list(boxes_b)
    traversal = _BoxTraversal(boxes, callback, cutoff, token)
    n_a = len(boxes_a)
    traversal.bipartite_run(np.arange(n_a), np.arange(n_a, len(boxes)))
    return not token.cancelled
