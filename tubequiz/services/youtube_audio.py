from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from tubequiz.core.config import Settings
from tubequiz.core.errors import DownloadError
from tubequiz.services.youtube import validate_video_url

logger = logging.getLogger(__name__)


@dataclass
class AudioDownload:
    path: Path
    title: str | None


class YtDlpDownloader:
    """
    Extracts mp3 audio for a single YouTube video using the yt-dlp executable.

    The caller owns `out_dir` and is responsible for removing it.
    """

    def __init__(
        self,
        ytdlp_path: str = "yt-dlp",
        *,
        ffmpeg_location: str | None = None,
        timeout_sec: float | None = None,
        cookies_file: str | None = None,
        proxy_url: str | None = None,
    ) -> None:
        self.ytdlp_path = ytdlp_path
        self.ffmpeg_location = ffmpeg_location
        self.timeout_sec = timeout_sec if timeout_sec and timeout_sec > 0 else None
        self.cookies_file = cookies_file
        self.proxy_url = proxy_url

    @classmethod
    def from_settings(cls, s: Settings) -> "YtDlpDownloader":
        return cls(
            s.ytdlp_path,
            ffmpeg_location=s.ffmpeg_location,
            timeout_sec=s.ytdlp_timeout_sec,
            cookies_file=s.cookies_file,
            proxy_url=s.proxy_url,
        )

    def _common_args(self) -> list[str]:
        args = ["--no-playlist"]
        if self.cookies_file:
            args.extend(["--cookies", self.cookies_file])
        if self.proxy_url:
            args.extend(["--proxy", self.proxy_url])
        return args

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(args, capture_output=True, text=True, timeout=self.timeout_sec)
        except FileNotFoundError:
            raise DownloadError(f"yt-dlp not found at {self.ytdlp_path!r}. Install it and ensure it is on PATH.")
        except subprocess.TimeoutExpired:
            raise DownloadError(f"yt-dlp timed out after {self.timeout_sec:.0f}s")

    def fetch_title(self, url: str) -> str | None:
        """Best-effort title lookup; never raises."""
        args = [self.ytdlp_path, "--print", "title", "--skip-download", *self._common_args(), url]
        try:
            p = self._run(args)
        except DownloadError as e:
            logger.warning("Title lookup failed for %s: %s", url, e)
            return None
        if p.returncode != 0:
            logger.warning("Title lookup failed for %s (rc=%s): %s", url, p.returncode, (p.stderr or "").strip()[:300])
            return None
        title = (p.stdout or "").strip().splitlines()
        return title[0].strip() if title and title[0].strip() else None

    def fetch_audio(self, url: str, out_dir: Path) -> AudioDownload:
        validate_video_url(url)
        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

        title = self.fetch_title(url)
        logger.info("Video title: %s", title)

        # Keep template without extension; yt-dlp picks it after extraction.
        outtmpl = str(out_dir / "audio.%(ext)s")
        args = [
            self.ytdlp_path,
            *self._common_args(),
            "-x",
            "--audio-format",
            "mp3",
            "--audio-quality",
            "0",
            "-o",
            outtmpl,
        ]
        if self.ffmpeg_location:
            args.extend(["--ffmpeg-location", self.ffmpeg_location])
        args.append(url)

        logger.info("Downloading audio for %s into %s", url, out_dir)
        p = self._run(args)
        if p.returncode != 0:
            raise DownloadError(p.stderr.strip() or p.stdout.strip() or "yt-dlp audio download failed")
        if p.stderr and p.stderr.strip():
            logger.debug("yt-dlp stderr: %s", p.stderr.strip()[:500])

        audio_path = out_dir / "audio.mp3"
        if not audio_path.exists():
            # yt-dlp fell back to another container; take the largest audio.* it wrote
            candidates = sorted(out_dir.glob("audio.*"), key=lambda x: x.stat().st_size, reverse=True)
            if not candidates:
                raise DownloadError("yt-dlp succeeded but no audio file was produced")
            audio_path = candidates[0]

        size = audio_path.stat().st_size
        if size == 0:
            raise DownloadError("Downloaded audio file is empty")

        logger.info("Downloaded audio: %s (%.2f MB)", audio_path, size / (1024 * 1024))
        return AudioDownload(path=audio_path, title=title)
