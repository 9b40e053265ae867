from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..core.geometry import GeometryKernel, ExactPredicatesKernel
from ..detection.broad_phase import DEFAULT_CUTOFF
from ..detection.execution import make_execution


DEFAULT_RANDOM_SEED = 0


class Concurrency(Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
    PARALLEL_IF_AVAILABLE = "parallel_if_available"

    @property
    def is_parallel(self) -> bool:
        # worker threads are always available
        return self is not Concurrency.SEQUENTIAL


@dataclass
class SelfIntersectionOptions:
    kernel: GeometryKernel = field(default_factory=ExactPredicatesKernel)
    vertex_point_map: Any = None
    maximum_number: Optional[int] = None
    concurrency: Concurrency = Concurrency.SEQUENTIAL
    random_seed: int = DEFAULT_RANDOM_SEED
    cutoff: int = DEFAULT_CUTOFF
    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.concurrency, str):
            self.concurrency = Concurrency(self.concurrency)
        self.validate()

    def validate(self) -> None:
        if self.maximum_number is not None and (not isinstance(self.maximum_number, int) or self.maximum_number < 0):
            raise ValueError("maximum_number must be a non-negative integer or None")
        if not isinstance(self.random_seed, int) or self.random_seed < 0:
            raise ValueError("random_seed must be a non-negative integer")
        if not isinstance(self.cutoff, int) or self.cutoff < 1:
            raise ValueError("cutoff must be a positive integer")
        if self.max_workers is not None and (not isinstance(self.max_workers, int) or self.max_workers < 1):
            raise ValueError("max_workers must be a positive integer or None")
        if not isinstance(self.concurrency, Concurrency):
            raise ValueError(f"unknown concurrency mode: {self.concurrency!r}")
        for name in ("collinear", "coplanar", "coplanar_orientation",
                     "construct_segment", "construct_triangle", "do_intersect"):
            if not callable(getattr(self.kernel, name, None)):
                raise ValueError(f"kernel is missing '{name}'")

    @property
    def limited(self) -> bool:
        return self.maximum_number is not None

    def execution(self):
        return make_execution(self.concurrency.is_parallel, self.max_workers)
