import argparse
import logging
import sys

from PySelfIntersectLib import load_obj, self_intersections, does_self_intersect
from PySelfIntersectLib.io.perf import perf


def main(argv=None):
    ap = argparse.ArgumentParser(description="Report self-intersecting faces of a triangle mesh (OBJ).")
    ap.add_argument("path")
    ap.add_argument("--test", action="store_true", help="only answer whether the mesh self-intersects")
    ap.add_argument("--max", type=int, default=None, dest="maximum_number")
    ap.add_argument("--parallel", action="store_true")
    ap.add_argument("--workers", type=int, default=None)
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--perf-csv", default=None)
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    mesh = load_obj(args.path)
    concurrency = "parallel" if args.parallel else "sequential"
    if args.test:
        hit = does_self_intersect(mesh, concurrency=concurrency, max_workers=args.workers,
                                  random_seed=args.seed)
        print("self-intersecting" if hit else "no self-intersection")
        rc = 1 if hit else 0
    else:
        pairs = self_intersections(mesh, maximum_number=args.maximum_number, concurrency=concurrency,
                                   max_workers=args.workers, random_seed=args.seed)
        for fa, fb in pairs:
            print(fa, fb)
        print(f"{len(pairs)} intersecting face pairs", file=sys.stderr)
        rc = 1 if pairs else 0
    if args.perf_csv:
        perf.write_csv(args.perf_csv)
    return rc


if __name__ == '__main__':
    raise SystemExit(main())
