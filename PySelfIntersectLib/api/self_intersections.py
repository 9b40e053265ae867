"""Public queries: enumerate self-intersecting face pairs, or test for any.

Both queries run the same pipeline: face boxes (degenerate faces reported as
``(f, f)``), box self-intersection as broad phase, and the adjacency-aware
face test as narrow phase. They differ in what an accepted pair does: the
enumeration appends it to the output and may stop at ``maximum_number``;
the test stops at the first one.

Example::

    pairs = self_intersections(mesh)
    if does_self_intersect(mesh, concurrency="parallel"):
        ...
"""
import dataclasses
import logging
from typing import Any, Iterable, Optional

from ..detection.box_builder import build_face_boxes
from ..detection.broad_phase import box_self_intersection
from ..detection.execution import CancellationToken, ConcurrentPairs, RelaxedCounter
from ..detection.narrow_phase import StrictIntersectFaces
from ..io.perf import perf
from ..utils.validation import as_halfedge_mesh
from .options import SelfIntersectionOptions


logger = logging.getLogger(__name__)


def _resolve_options(options: Optional[SelfIntersectionOptions], kwargs) -> SelfIntersectionOptions:
    if options is None:
        return SelfIntersectionOptions(**kwargs)
    if kwargs:
        return dataclasses.replace(options, **kwargs)
    return options


def _prepare(mesh, faces, opts):
    tm = as_halfedge_mesh(mesh)
    vpm = opts.vertex_point_map if opts.vertex_point_map is not None else tm.points
    face_range = tm.faces() if faces is None else faces
    return tm, vpm, face_range


def self_intersections(mesh, out: Any = None, faces: Optional[Iterable] = None,
                       options: Optional[SelfIntersectionOptions] = None, **kwargs):
    """Collect pairs of faces that intersect beyond a shared edge or vertex.

    ``out`` is any object with ``append`` (a new list by default) and is
    returned. Degenerate faces come first as ``(f, f)``. With
    ``maximum_number`` set, sequential runs stop at exactly that many pairs;
    parallel runs stop once the shared counter reaches it and may return a
    few more.
    """
    opts = _resolve_options(options, kwargs)
    if out is None:
        out = []
    if opts.limited and opts.maximum_number == 0:
        return out
    tm, vpm, face_range = _prepare(mesh, faces, opts)
    counter = RelaxedCounter()

    def on_degenerate(pair) -> bool:
        out.append(pair)
        n = counter.increment()
        return not (opts.limited and n >= opts.maximum_number)

    with perf.section("box_build"):
        built = build_face_boxes(face_range, tm, vpm, opts.kernel, on_degenerate)
    if built.stopped:
        logger.debug("result cap reached on degenerate faces")
        return out

    execution = opts.execution()
    token = CancellationToken()
    parallel = execution.workers > 1
    sink = ConcurrentPairs() if parallel else out

    if opts.limited:
        def emit(pair) -> None:
            sink.append(pair)
            if counter.increment() >= opts.maximum_number:
                token.cancel()
    else:
        emit = sink.append

    classifier = StrictIntersectFaces(tm, vpm, opts.kernel, emit)
    with perf.section("broad_phase"):
        box_self_intersection(built.boxes, classifier, opts.cutoff, execution, token, opts.random_seed)
    if parallel:
        for pair in sink:
            out.append(pair)
    logger.debug("self_intersections: %d candidate pairs tested, %d reported, stopped early: %s",
                 classifier.calls.value, counter.value, token.cancelled)
    return out


def does_self_intersect(mesh, faces: Optional[Iterable] = None,
                        options: Optional[SelfIntersectionOptions] = None, **kwargs) -> bool:
    """True as soon as one intersecting pair or one degenerate face is found."""
    opts = _resolve_options(options, kwargs)
    tm, vpm, face_range = _prepare(mesh, faces, opts)

    with perf.section("box_build"):
        built = build_face_boxes(face_range, tm, vpm, opts.kernel, on_degenerate=lambda pair: False)
    if built.degenerate:
        logger.debug("degenerate face %r found", built.degenerate[0][0])
        return True

    token = CancellationToken()
    witness = []

    def emit(pair) -> None:
        witness.append(pair)
        token.cancel()

    classifier = StrictIntersectFaces(tm, vpm, opts.kernel, emit)
    with perf.section("broad_phase"):
        box_self_intersection(built.boxes, classifier, opts.cutoff, opts.execution(), token, opts.random_seed)
    if witness:
        logger.debug("witness pair %r after %d candidate tests", witness[0], classifier.calls.value)
    return bool(witness)
