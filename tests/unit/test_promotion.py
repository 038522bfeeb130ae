import errno
import os
import pytest
from pathlib import Path
from unittest.mock import patch
from avb.infrastructure.promotion import promote, remove_if_exists, reserve

def test_promote_same_filesystem(tmp_path):
    src = tmp_path / "enc.mkv"
    dst = tmp_path / "save" / "movie.mkv"
    dst.parent.mkdir()
    src.write_bytes(b"encoded")

    promote(src, dst)

    assert not src.exists()
    assert dst.read_bytes() == b"encoded"

def test_promote_cross_device_falls_back_to_copy(tmp_path):
    src = tmp_path / "enc.mkv"
    dst = tmp_path / "movie.mkv"
    src.write_bytes(b"encoded")

    with patch("avb.infrastructure.promotion.os.rename", side_effect=OSError(errno.EXDEV, "Invalid cross-device link")):
        promote(src, dst)

    assert not src.exists()
    assert dst.read_bytes() == b"encoded"

def test_promote_other_errors_propagate(tmp_path):
    src = tmp_path / "enc.mkv"
    dst = tmp_path / "movie.mkv"
    src.write_bytes(b"encoded")

    with patch("avb.infrastructure.promotion.os.rename", side_effect=PermissionError(errno.EACCES, "Permission denied")):
        with pytest.raises(PermissionError):
            promote(src, dst)

    assert src.exists()
    assert not dst.exists()

def test_promote_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        promote(tmp_path / "missing.mkv", tmp_path / "movie.mkv")

def test_reserve_creates_empty_file(tmp_path):
    target = tmp_path / "hash.mkv"
    reserve(target)
    assert target.exists()
    assert target.stat().st_size == 0

def test_reserve_refuses_existing(tmp_path):
    target = tmp_path / "hash.mkv"
    target.write_bytes(b"left over from a crashed run")
    with pytest.raises(FileExistsError):
        reserve(target)
    assert target.read_bytes() == b"left over from a crashed run"

def test_remove_if_exists(tmp_path):
    target = tmp_path / "x.mkv"
    assert remove_if_exists(target) is False
    target.write_bytes(b"x")
    assert remove_if_exists(target) is True
    assert not target.exists()

def test_promote_cross_device_copies_via_partial_name(tmp_path):
    src = tmp_path / "enc.mkv"
    dst = tmp_path / "save" / "movie.mkv"
    dst.parent.mkdir()
    src.write_bytes(b"encoded")
    seen = []

    def _copy(s, d):
        seen.append(Path(d))
        Path(d).write_bytes(Path(s).read_bytes())

    with patch("avb.infrastructure.promotion.os.rename", side_effect=OSError(errno.EXDEV, "Invalid cross-device link")):
        with patch("avb.infrastructure.promotion.shutil.copy2", side_effect=_copy):
            promote(src, dst)

    assert seen == [dst.parent / ".movie.mkv.partial"]
    assert dst.read_bytes() == b"encoded"
    assert sorted(p.name for p in dst.parent.iterdir()) == ["movie.mkv"]

def test_promote_interrupted_cross_device_copy_leaves_no_save(tmp_path):
    src = tmp_path / "enc.mkv"
    dst = tmp_path / "save" / "movie.mkv"
    dst.parent.mkdir()
    src.write_bytes(b"VIDEO full encode")

    def _copy_then_fail(s, d):
        Path(d).write_bytes(b"VIDEO trunc")
        raise OSError(errno.ENOSPC, "No space left on device")

    with patch("avb.infrastructure.promotion.os.rename", side_effect=OSError(errno.EXDEV, "Invalid cross-device link")):
        with patch("avb.infrastructure.promotion.shutil.copy2", side_effect=_copy_then_fail):
            with pytest.raises(OSError):
                promote(src, dst)

    assert not dst.exists()
    assert list(dst.parent.iterdir()) == []
    assert src.read_bytes() == b"VIDEO full encode"
