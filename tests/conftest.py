import os

# must be set before tubequiz is imported anywhere
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ.setdefault("OPENAI_API_KEY", "sk-test-not-used")

from pathlib import Path  # noqa: E402

import pytest  # noqa: E402

from tubequiz.db.base import Base  # noqa: E402
from tubequiz.db.session import SessionLocal, engine  # noqa: E402
from tubequiz.models.video import Video  # noqa: E402
from tubequiz.services.stt import STTResult, count_words  # noqa: E402
from tubequiz.services.youtube_audio import AudioDownload  # noqa: E402

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def make_answer(q="What is tested?", a="Alpha", b="Beta", c="Gamma", d="Delta", correct="A") -> str:
    return f"Q: {q}\nA: {a}\nB: {b}\nC: {c}\nD: {d}\nCORRECT: {correct}"


class FakeDownloader:
    def __init__(self, title="Test Video", error: Exception | None = None, observe=None):
        self.title = title
        self.error = error
        self.observe = observe
        self.calls: list[tuple[str, Path]] = []

    def fetch_audio(self, url, out_dir):
        self.calls.append((url, Path(out_dir)))
        if self.observe:
            self.observe("download")
        if self.error:
            raise self.error
        path = Path(out_dir) / "audio.mp3"
        path.write_bytes(b"ID3fake-mp3-bytes")
        return AudioDownload(path=path, title=self.title)


class FakeTranscriber:
    def __init__(self, text="", error: Exception | None = None, observe=None):
        self.text = text
        self.error = error
        self.observe = observe
        self.calls: list[Path] = []

    def transcribe(self, audio_path):
        self.calls.append(Path(audio_path))
        if self.observe:
            self.observe("transcribe")
        if self.error:
            raise self.error
        text = self.text.strip()
        return STTResult(text=text, word_count=count_words(text))


class FakeChat:
    """Returns queued answers in order; an Exception entry is raised instead."""

    def __init__(self, answers=None, observe=None):
        self.answers = list(answers or [])
        self.observe = observe
        self.prompts: list[str] = []

    def complete(self, system, prompt):
        self.prompts.append(prompt)
        if self.observe:
            self.observe("question")
        answer = self.answers.pop(0) if self.answers else make_answer()
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_video(db):
    def _make(creator_id="creator-1", url=VIDEO_URL, status="pending", max_segments=None, **kw) -> Video:
        v = Video(url=url, title=url, creator_id=creator_id, status=status, max_segments=max_segments, **kw)
        db.add(v)
        db.commit()
        db.refresh(v)
        return v

    return _make


@pytest.fixture
def words():
    def _words(n: int, prefix: str = "w") -> str:
        return " ".join(f"{prefix}{i}" for i in range(n))

    return _words
