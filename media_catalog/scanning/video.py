"""Video probing and representative-frame sampling via ffprobe/ffmpeg."""
from __future__ import annotations

import io
import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from PIL import Image, ImageStat

from ..config import DEFAULT_BLACK_FRAME_THRESHOLD, DEFAULT_WHITE_FRAME_THRESHOLD
from ..errors import CodecError

logger = logging.getLogger(__name__)


def _tool(name: str) -> str:
    found = shutil.which(name)
    if not found:
        raise CodecError(f"{name} not found on PATH")
    return found


def run_ffprobe(path: Path) -> dict:
    """Return ffprobe's JSON description (format + streams) of *path*."""
    cmd = [
        _tool("ffprobe"),
        "-v", "error",
        "-show_format",
        "-show_streams",
        "-of", "json",
        str(path),
    ]
    try:
        proc = subprocess.run(cmd, check=False, stdout=subprocess.PIPE,
                              stderr=subprocess.PIPE, text=True)
    except OSError as exc:
        raise CodecError(f"ffprobe failed for {path}: {exc}") from exc
    if proc.returncode != 0:
        raise CodecError(proc.stderr.strip() or f"ffprobe error for {path}")
    try:
        parsed = json.loads(proc.stdout or "{}")
    except json.JSONDecodeError as exc:
        raise CodecError(f"invalid ffprobe output for {path}: {exc}") from exc
    return parsed if isinstance(parsed, dict) else {}


def probe_duration(path: Path) -> float:
    """Container duration in seconds; 0.0 when ffprobe reports none."""
    fmt = run_ffprobe(path).get("format") or {}
    try:
        return float(fmt.get("duration") or 0.0)
    except (TypeError, ValueError):
        return 0.0


def extract_frame(path: Path, timestamp: float) -> Image.Image:
    """Decode the single frame at *timestamp* seconds into an RGB image."""
    args: List[str] = [_tool("ffmpeg"), "-hide_banner", "-loglevel", "error"]
    if timestamp > 0:
        args.extend(["-ss", f"{timestamp:.3f}"])
    args.extend(["-i", str(path), "-frames:v", "1",
                 "-f", "image2pipe", "-vcodec", "png", "pipe:1"])
    try:
        completed = subprocess.run(args, capture_output=True, check=False)
    except OSError as exc:
        raise CodecError(f"ffmpeg failed for {path}: {exc}") from exc
    if completed.returncode != 0 or not completed.stdout:
        stderr = completed.stderr.decode("utf-8", "replace").strip()
        raise CodecError(stderr or f"no frame at {timestamp:.1f}s in {path}")
    try:
        with Image.open(io.BytesIO(completed.stdout)) as image:
            return image.convert("RGB")
    except OSError as exc:
        raise CodecError(f"undecodable frame from {path}: {exc}") from exc


def mean_brightness(image: Image.Image) -> float:
    """Average of the per-channel means."""
    means = ImageStat.Stat(image).mean
    return sum(means) / len(means)


def candidate_timestamps(duration: float) -> Sequence[float]:
    return (0.0, duration / 3.0, duration * 2.0 / 3.0)


def sample_representative_frame(
    path: Path,
    black_threshold: float = DEFAULT_BLACK_FRAME_THRESHOLD,
    white_threshold: float = DEFAULT_WHITE_FRAME_THRESHOLD,
) -> Image.Image:
    """
    Pick a frame that is neither near-black nor near-white.

    Candidates are tried at 0, 1/3 and 2/3 of the duration; the first whose
    mean brightness lies strictly between the thresholds wins. When all are
    rejected the last candidate is used anyway.
    """
    path = Path(path)
    duration = probe_duration(path)
    if duration <= 0:
        raise CodecError(f"Invalid video duration for {path}: {duration}")

    frame: Optional[Image.Image] = None
    for timestamp in candidate_timestamps(duration):
        frame = extract_frame(path, timestamp)
        brightness = mean_brightness(frame)
        if black_threshold < brightness < white_threshold:
            return frame
        logger.debug("Frame at %.1fs of %s rejected (brightness %.1f)",
                     timestamp, path.name, brightness)
    logger.debug("All candidate frames of %s rejected, using the last one", path.name)
    return frame
