import argparse
import logging
from typing import List, Optional

from mp3carve.carve_exceptions import CarveError
from mp3carve.config import CarveConfig, parse_phases
from mp3carve.extract import THRESHOLD
from mp3carve.pipeline import analyze_file, carve_files

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

def _phases_arg(text: str):
    try:
        return parse_phases(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mp3carve",
        description="Recover byte-swapped MP3 streams hidden inside container files.",
    )
    parser.add_argument("files", nargs="+", help="input files")
    parser.add_argument("-o", "--outdir", help="write streams here instead of next to each input")
    parser.add_argument("-j", "--jobs", type=int, default=1, help="files processed in parallel (default 1)")
    parser.add_argument("--threshold", type=int, default=THRESHOLD,
                        help=f"minimum run size in bytes, exclusive (default {THRESHOLD})")
    parser.add_argument("--phases", type=_phases_arg, default=(0, 1, 2, 3),
                        help="comma separated swap phases to try (default 0,1,2,3)")
    parser.add_argument("-n", "--dry-run", action="store_true", help="report streams without writing them")
    parser.add_argument("--analyze", action="store_true",
                        help="treat inputs as recovered MP3s and print frame statistics")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true")
    verbosity.add_argument("-q", "--quiet", action="store_true")
    return parser

def _analyze(paths: List[str]) -> int:
    status = 0
    for p in paths:
        try:
            st = analyze_file(p)
        except CarveError as e:
            logging.getLogger(__name__).error("%s", e)
            status = 1
            continue
        print(f"{p}: {st['total_frames']} frames, {st['padded_frames']} padded, "
              f"{'VBR' if st['vbr'] else 'CBR'}, {st['duration_sec']:.2f}s, "
              f"{st['trailing_bytes']} trailing bytes")
    return status

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)

    if args.analyze:
        return _analyze(args.files)

    config = CarveConfig(threshold=args.threshold, phases=args.phases, outdir=args.outdir,
                         jobs=args.jobs, dry_run=args.dry_run)
    try:
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    results = carve_files(args.files, config)
    return 0 if all(p in results for p in args.files) else 1

if __name__ == "__main__":
    raise SystemExit(main())
