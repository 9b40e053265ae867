class SelfIntersectionError(Exception):
    pass


class MeshTopologyError(SelfIntersectionError, ValueError):
    pass


class ParallelExecutionError(SelfIntersectionError, RuntimeError):
    pass
