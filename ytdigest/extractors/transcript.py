"""Transcript fetcher — captions via yt-dlp, parsed from WebVTT.

Manual subtitles are tried first, auto-generated ones second. Entries come
back in caption order, which is chronological.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from ..errors import TranscriptUnavailable
from ..schemas import TranscriptEntry

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

_CUE_RE = re.compile(
    r"(\d{1,2}):(\d{2})(?::(\d{2}))?\.(\d{3})\s+-->\s+(\d{1,2}):(\d{2})(?::(\d{2}))?\.(\d{3})"
)
_LANG_RE = re.compile(r"\.([A-Za-z]{2,3}(?:-[A-Za-z0-9]+)?)\.vtt$")


def _cue_to_sec(h_or_m: str, m_or_s: str, s: Optional[str], ms: str) -> float:
    if s is not None:
        return int(h_or_m) * 3600 + int(m_or_s) * 60 + int(s) + int(ms) / 1000
    return int(h_or_m) * 60 + int(m_or_s) + int(ms) / 1000


def parse_vtt(raw_text: str, lang: Optional[str] = None) -> list[TranscriptEntry]:
    """Turn WebVTT text into transcript entries.

    Styling tags, music-only cues and lines repeated by rolling
    auto-captions are dropped.
    """
    entries: list[TranscriptEntry] = []
    previous = ""
    start: Optional[float] = None
    end: Optional[float] = None
    lines: list[str] = []

    def flush() -> None:
        if start is not None and lines:
            entries.append(TranscriptEntry(
                text=" ".join(lines),
                offset=round(start, 3),
                duration=round(max(0.0, (end or start) - start), 3),
                lang=lang,
            ))

    for original in raw_text.splitlines():
        line = re.sub(r"<[^>]+>", "", original).strip()
        if not line or line.upper().startswith("WEBVTT") or line.isdigit():
            continue
        if line.lower().startswith(("kind:", "language:")):
            continue
        if re.fullmatch(r"[\[\(♪♫\s\]\)]+", line):
            continue

        cue = _CUE_RE.match(line)
        if cue:
            flush()
            lines = []
            g = cue.groups()
            start = _cue_to_sec(g[0], g[1], g[2], g[3])
            end = _cue_to_sec(g[4], g[5], g[6], g[7])
            continue

        if line == previous:
            continue
        lines.append(line)
        previous = line

    flush()
    return entries


def _run_yt_dlp(yt_dlp_path: str, url: str, temp_dir: str, auto: bool) -> Optional[list[TranscriptEntry]]:
    cmd = [
        yt_dlp_path, "--skip-download",
        "--sub-format", "vtt", "--sub-langs", "en.*",
        "--no-warnings", "--quiet",
        "-o", str(Path(temp_dir) / "%(id)s.%(ext)s"),
        "--write-auto-subs" if auto else "--write-subs",
        url,
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=120, check=False)
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("yt-dlp failed to run: %s", exc)
        return None
    if result.returncode != 0:
        logger.debug("yt-dlp exited %d: %s", result.returncode, result.stderr.strip()[:200])
        return None

    files = sorted(Path(temp_dir).glob("*.vtt"))
    if not files:
        return None
    lang_match = _LANG_RE.search(files[0].name)
    entries = parse_vtt(
        files[0].read_text(encoding="utf-8", errors="replace"),
        lang=lang_match.group(1) if lang_match else None,
    )
    return entries or None


def fetch_transcript(video_id: str) -> list[TranscriptEntry]:
    """Fetch timestamped captions for a video.

    Raises TranscriptUnavailable when yt-dlp is missing or the video has no
    captions of either kind.
    """
    yt_dlp_path = shutil.which("yt-dlp")
    if not yt_dlp_path:
        raise TranscriptUnavailable("yt-dlp is not installed; it is needed to fetch captions")

    url = WATCH_URL.format(video_id=video_id)
    for auto in (False, True):
        with tempfile.TemporaryDirectory(prefix="ytdigest-subs-") as temp_dir:
            entries = _run_yt_dlp(yt_dlp_path, url, temp_dir, auto)
        if entries:
            kind = "auto" if auto else "manual"
            logger.info("Fetched %d %s caption entries for %s", len(entries), kind, video_id)
            return entries

    raise TranscriptUnavailable(
        "No captions/transcript available for this video. "
        "Try a video with auto-generated or manual captions."
    )
