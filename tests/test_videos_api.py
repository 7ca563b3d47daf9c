import pytest
from fastapi.testclient import TestClient

from conftest import VIDEO_URL, FakeChat, FakeDownloader, FakeTranscriber, make_answer
from tubequiz.main import app
from tubequiz.models.video import Video
from tubequiz.services.pipeline import VideoPipeline
from tubequiz.services.questions import QuestionGenerator
from tubequiz.worker import tasks

client = TestClient(app)

OWNER = {"X-Creator-Id": "owner-1"}


@pytest.fixture
def fake_pipeline(monkeypatch, tmp_path, words):
    """ENV=test runs the celery task inline; swap its providers for fakes."""

    def _install(downloader=None, transcriber=None, chat=None):
        pipeline = VideoPipeline(
            downloader or FakeDownloader(title="Photosynthesis 101"),
            transcriber or FakeTranscriber(text=words(10)),
            QuestionGenerator(chat or FakeChat()),
            work_dir=tmp_path / "work",
        )
        monkeypatch.setattr(tasks, "build_pipeline", lambda s: pipeline)
        return pipeline

    return _install


def test_create_video_runs_pipeline_to_completion(fake_pipeline):
    fake_pipeline(chat=FakeChat([make_answer(correct="A"), make_answer(correct="D"), make_answer(correct="B")]))

    r = client.post("/videos", json={"url": VIDEO_URL, "max_segments": 3}, headers=OWNER)
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert isinstance(body["task_id"], str)
    video_id = body["video"]["video_id"]

    s = client.get(f"/videos/{video_id}/status", headers=OWNER)
    assert s.status_code == 200
    status = s.json()
    assert status["status"] == "completed"
    assert status["error_message"] is None
    assert status["title"] == "Photosynthesis 101"
    assert status["word_count"] == 10
    assert status["max_segments"] == 3

    q = client.get(f"/videos/{video_id}/quiz", headers=OWNER)
    assert q.status_code == 200
    segments = q.json()["segments"]
    assert [seg["idx"] for seg in segments] == [0, 1, 2]
    assert [seg["word_count"] for seg in segments] == [4, 4, 2]
    assert [seg["question"]["correct_answer"] for seg in segments] == ["A", "D", "B"]
    assert set(segments[0]["question"]["options"]) == {"A", "B", "C", "D"}


def test_answers_are_graded(fake_pipeline):
    fake_pipeline(chat=FakeChat([make_answer(correct="C")]))
    r = client.post("/videos", json={"url": VIDEO_URL, "max_segments": 1}, headers=OWNER)
    video_id = r.json()["video"]["video_id"]
    question_id = client.get(f"/videos/{video_id}/quiz", headers=OWNER).json()["segments"][0]["question"]["question_id"]

    right = client.post(f"/questions/{question_id}/responses", json={"selected_answer": "c"}, headers=OWNER)
    assert right.status_code == 200
    assert right.json()["is_correct"] is True
    assert right.json()["selected_answer"] == "C"

    wrong = client.post(f"/questions/{question_id}/responses", json={"selected_answer": "A"}, headers=OWNER)
    assert wrong.json()["is_correct"] is False

    bad = client.post(f"/questions/{question_id}/responses", json={"selected_answer": "E"}, headers=OWNER)
    assert bad.status_code == 400

    missing = client.post("/questions/nope/responses", json={"selected_answer": "A"}, headers=OWNER)
    assert missing.status_code == 404


def test_failed_download_is_visible_in_status(fake_pipeline):
    fake_pipeline(downloader=FakeDownloader(error=Exception("ERROR: Private video")))

    r = client.post("/videos", json={"url": VIDEO_URL}, headers=OWNER)
    assert r.status_code == 200
    video_id = r.json()["video"]["video_id"]

    status = client.get(f"/videos/{video_id}/status", headers=OWNER).json()
    assert status["status"] == "error"
    assert status["error_message"] == "Failed to download video: ERROR: Private video"


def test_missing_provider_config_fails_video(monkeypatch):
    def broken(s):
        raise ValueError("OPENAI_API_KEY is missing")

    monkeypatch.setattr(tasks, "build_pipeline", broken)

    r = client.post("/videos", json={"url": VIDEO_URL}, headers=OWNER)
    assert r.status_code == 200
    video_id = r.json()["video"]["video_id"]

    status = client.get(f"/videos/{video_id}/status", headers=OWNER).json()
    assert status["status"] == "error"
    assert status["error_message"] == "Pipeline configuration error: OPENAI_API_KEY is missing"


def test_create_requires_creator():
    r = client.post("/videos", json={"url": VIDEO_URL})
    assert r.status_code == 401


@pytest.mark.parametrize(
    "url, detail",
    [
        ("", "Missing URL"),
        ("https://vimeo.com/12345", "Only YouTube URLs are supported"),
        ("youtube.com/watch?v=dQw4w9WgXcQ", "Invalid URL format"),
    ],
)
def test_create_rejects_bad_url(url, detail):
    r = client.post("/videos", json={"url": url}, headers=OWNER)
    assert r.status_code == 400
    assert r.json()["detail"] == detail


@pytest.mark.parametrize("max_segments", [0, -1])
def test_create_rejects_non_positive_override(max_segments):
    r = client.post("/videos", json={"url": VIDEO_URL, "max_segments": max_segments}, headers=OWNER)
    assert r.status_code == 422


def test_other_creator_cannot_see_video(fake_pipeline):
    fake_pipeline()
    video_id = client.post("/videos", json={"url": VIDEO_URL}, headers=OWNER).json()["video"]["video_id"]

    other = {"X-Creator-Id": "someone-else"}
    assert client.get(f"/videos/{video_id}/status", headers=other).status_code == 404
    assert client.get(f"/videos/{video_id}/quiz", headers=other).status_code == 404


def test_enqueue_failure_marks_video_error(monkeypatch, db):
    def broker_down(*args, **kwargs):
        raise ConnectionError("Error 111 connecting to localhost:6379")

    monkeypatch.setattr(tasks.process_video, "delay", broker_down)

    r = client.post("/videos", json={"url": VIDEO_URL}, headers=OWNER)
    assert r.status_code == 503
    assert r.json()["detail"].startswith("Failed to enqueue processing: Error 111")

    rows = db.query(Video).all()
    assert len(rows) == 1
    assert rows[0].status == "error"
    assert rows[0].error_message.startswith("Failed to enqueue processing:")
