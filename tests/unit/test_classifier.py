import pytest
from pathlib import Path
from avb.infrastructure.classifier import guess_video, is_junk

@pytest.mark.parametrize("name", [
    ".DS_Store",
    "._movie.mp4",
    "Thumbs.db",
    "desktop.ini",
    "Desktop.ini",
    "ehthumbs.db",
    ".movie.mp4.swp",
    "~$report.docx",
    ".~lock.notes.odt#",
    "backup.mkv~",
    "npm-debug.log",
])
def test_is_junk(name):
    assert is_junk(Path("/videos") / name)

@pytest.mark.parametrize("name", [
    "movie.mp4",
    "holiday.2019.mkv",
    "Thumbs.db.mp4",
    "notes.txt",
    "desktop.ini.bak",
])
def test_is_not_junk(name):
    assert not is_junk(Path("/videos") / name)

@pytest.mark.parametrize("name", [
    "movie.mp4",
    "movie.MP4",
    "movie.mkv",
    "clip.webm",
    "old.avi",
    "camera.mov",
    "camcorder.m2ts",
    "show.a.b.c.mkv",
])
def test_guess_video_accepts(name):
    assert guess_video(Path("/videos") / name)

@pytest.mark.parametrize("name", [
    "notes.txt",
    "cover.jpg",
    "song.mp3",
    "subs.srt",
    "no_extension",
    "archive.zip",
])
def test_guess_video_rejects(name):
    assert not guess_video(Path("/videos") / name)

def test_guess_video_ignores_content(tmp_path):
    fake = tmp_path / "really_text.mp4"
    fake.write_text("just text")
    assert guess_video(fake)
