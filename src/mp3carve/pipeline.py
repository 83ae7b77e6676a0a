from pathlib import Path
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor
from typing import Dict, Iterable, List, Optional
import logging

from .carve_exceptions import CarveError, InputError, OutputError
from .config import CarveConfig
from .deobfs import deobfuscate
from .extract import ExtractedRun, extract_runs
from .mp3stream import MP3Stream

logger = logging.getLogger(__name__)

def carve_buffer(data: bytes, config: Optional[CarveConfig] = None) -> List[ExtractedRun]:
    """Try every phase over ``data`` and return all accepted runs by offset.

    Each phase works on its own deobfuscated copy, so phases share nothing.
    The sort is stable: runs at the same offset keep phase order.
    """
    config = (config or CarveConfig()).validate()
    found: List[ExtractedRun] = []
    for phase in config.phases:
        runs = extract_runs(deobfuscate(data, phase), threshold=config.threshold)
        logger.debug("phase %d: %d run(s)", phase, len(runs))
        found.extend(runs)
    found.sort(key=lambda r: r.offset)
    return found

def output_paths(source: str, count: int, outdir: Optional[str] = None) -> List[Path]:
    src = Path(source)
    base = Path(outdir) if outdir else src.parent
    return [base / f"{src.name}.{i + 1}.mp3" for i in range(count)]

def _read_input(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e}") from e

def _write_output(path: Path, data: bytes):
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise OutputError(f"Cannot write {path}: {e}") from e

@dataclass
class Output:
    path: Path
    offset: int
    size: int
    frames: int
    duration_sec: float

def _carve_outputs(path: str, config: CarveConfig) -> List[Output]:
    """Carve one file and write its streams; does not log.

    Runs inside pool workers, whose logging is not set up, so the
    caller reports the returned outputs.
    """
    data = _read_input(path)
    runs = carve_buffer(data, config)
    outs = []
    for run, out in zip(runs, output_paths(path, len(runs), config.outdir)):
        duration = MP3Stream(run.data).duration_seconds
        if not config.dry_run:
            _write_output(out, run.data)
        outs.append(Output(out, run.offset, len(run.data), run.frames, duration))
    return outs

def _report(outs: List[Output], config: CarveConfig) -> List[Path]:
    for o in outs:
        if config.dry_run:
            logger.info("found %s @ %d (%d bytes, %d frames, %.1fs)", o.path, o.offset, o.size, o.frames, o.duration_sec)
        else:
            logger.info("writing %s (%d frames, %.1fs)", o.path, o.frames, o.duration_sec)
    return [o.path for o in outs]

def carve_file(path: str, config: Optional[CarveConfig] = None) -> List[Path]:
    config = (config or CarveConfig()).validate()
    return _report(_carve_outputs(str(path), config), config)

def carve_files(paths: Iterable[str], config: Optional[CarveConfig] = None) -> Dict[str, List[Path]]:
    """Carve each file independently.

    Files are spread over ``config.jobs`` worker processes; all logging
    happens here in the calling process. A repeated path is carved once.
    A file that fails is logged and left out of the result; the others
    still run.
    """
    config = (config or CarveConfig()).validate()
    paths = list(dict.fromkeys(str(p) for p in paths))
    results: Dict[str, List[Path]] = {}
    failed: List[str] = []

    if config.jobs > 1 and len(paths) > 1:
        with ProcessPoolExecutor(max_workers=config.jobs) as executor:
            futures = {p: executor.submit(_carve_outputs, p, config) for p in paths}
            for p, future in futures.items():
                try:
                    results[p] = _report(future.result(), config)
                except CarveError as e:
                    logger.error("%s", e)
                    failed.append(p)
    else:
        for p in paths:
            try:
                results[p] = carve_file(p, config)
            except CarveError as e:
                logger.error("%s", e)
                failed.append(p)

    for p, outs in results.items():
        logger.debug("%s: %d stream(s)", p, len(outs))
    if failed:
        logger.warning("%d of %d file(s) failed", len(failed), len(paths))
    return results

def analyze_file(path: str):
    data = _read_input(str(path))
    return MP3Stream(data).stats()
