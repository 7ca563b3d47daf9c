from conftest import VIDEO_URL
from tubequiz.services.videos import TITLE_MAX_LEN, claim_video, create_video, set_transcribed


def test_create_video_starts_pending_with_url_title(db):
    v = create_video(db, VIDEO_URL, "owner", max_segments=4)
    assert v.status == "pending"
    assert v.title == VIDEO_URL
    assert v.max_segments == 4


def test_long_url_title_placeholder_is_truncated(db):
    url = VIDEO_URL + "&list=" + "x" * 1000
    v = create_video(db, url, "owner")
    assert v.url == url
    assert len(v.title) == TITLE_MAX_LEN


def test_long_downloaded_title_is_truncated(db, make_video):
    v = make_video()
    set_transcribed(db, v.video_id, title="t" * 2000, transcript="a b", word_count=2)
    db.refresh(v)
    assert len(v.title) == TITLE_MAX_LEN
    assert v.status == "processing"


def test_claim_only_once(db, make_video):
    v = make_video(creator_id="owner")
    assert claim_video(db, v.video_id, "owner") is True
    assert claim_video(db, v.video_id, "owner") is False
    db.refresh(v)
    assert v.status == "downloading"


def test_claim_requires_owner(db, make_video):
    v = make_video(creator_id="owner")
    assert claim_video(db, v.video_id, "intruder") is False
    db.refresh(v)
    assert v.status == "pending"
