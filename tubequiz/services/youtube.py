import re
from urllib.parse import parse_qs, urlparse

from tubequiz.core.errors import InvalidInput

_YT_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")

_YOUTUBE_HOSTS = {"youtube.com", "www.youtube.com", "m.youtube.com", "music.youtube.com"}
_SHORT_HOSTS = {"youtu.be", "www.youtu.be"}


def extract_youtube_video_id(url: str) -> str | None:
    """
    Supports:
    - https://www.youtube.com/watch?v=VIDEOID
    - https://youtu.be/VIDEOID
    - https://www.youtube.com/shorts/VIDEOID
    - https://www.youtube.com/embed/VIDEOID
    - https://www.youtube.com/live/VIDEOID
    """
    try:
        u = urlparse((url or "").strip())
    except ValueError:
        return None

    if u.scheme not in ("http", "https"):
        return None

    host = (u.hostname or "").lower()
    path = (u.path or "").strip("/")

    # youtu.be/VIDEOID
    if host in _SHORT_HOSTS:
        vid = path.split("/")[0] if path else ""
        return vid if _YT_ID_RE.match(vid) else None

    if host in _YOUTUBE_HOSTS:
        # youtube.com/watch?v=VIDEOID
        if path == "watch":
            q = parse_qs(u.query or "")
            vid = (q.get("v", [""])[0]).strip()
            return vid if _YT_ID_RE.match(vid) else None

        # youtube.com/{shorts,embed,live}/VIDEOID
        parts = path.split("/")
        if len(parts) >= 2 and parts[0] in ("shorts", "embed", "live"):
            vid = parts[1]
            return vid if _YT_ID_RE.match(vid) else None

    return None


def validate_video_url(url: str) -> str:
    """
    Returns the video id for a supported YouTube URL, raises InvalidInput otherwise.
    """
    raw = (url or "").strip()
    if not raw:
        raise InvalidInput("URL is required")

    try:
        u = urlparse(raw)
    except ValueError:
        raise InvalidInput("Invalid URL format")
    if u.scheme not in ("http", "https") or not u.netloc:
        raise InvalidInput("Invalid URL format")

    host = (u.hostname or "").lower()
    if host not in _YOUTUBE_HOSTS and host not in _SHORT_HOSTS:
        raise InvalidInput("Only YouTube URLs are supported")

    video_id = extract_youtube_video_id(raw)
    if not video_id:
        raise InvalidInput(f"Could not find a YouTube video id in URL: {raw}")
    return video_id
