import errno

import pytest

from app.utils.exceptions import RelocationError
from domains.image_relay import relocator
from domains.image_relay.relocator import relocate


def test_relocate_moves_file_into_destination(tmp_path):
    src_dir = tmp_path / "source"
    dest_dir = tmp_path / "destination"
    src_dir.mkdir()
    dest_dir.mkdir()
    src = src_dir / "cat.png"
    src.write_bytes(b"png")

    target = relocate(src, dest_dir)

    assert target == dest_dir / "cat.png"
    assert target.read_bytes() == b"png"
    assert not src.exists()


def test_relocate_refuses_to_overwrite(tmp_path):
    src_dir = tmp_path / "source"
    dest_dir = tmp_path / "destination"
    src_dir.mkdir()
    dest_dir.mkdir()
    src = src_dir / "cat.png"
    src.write_bytes(b"new")
    (dest_dir / "cat.png").write_bytes(b"archived")

    with pytest.raises(RelocationError, match="already exists"):
        relocate(src, dest_dir)

    assert src.read_bytes() == b"new"
    assert (dest_dir / "cat.png").read_bytes() == b"archived"


def test_relocate_missing_source(tmp_path):
    dest_dir = tmp_path / "destination"
    dest_dir.mkdir()

    with pytest.raises(RelocationError):
        relocate(tmp_path / "gone.png", dest_dir)


def test_relocate_falls_back_to_copy_across_devices(tmp_path, monkeypatch):
    src_dir = tmp_path / "source"
    dest_dir = tmp_path / "destination"
    src_dir.mkdir()
    dest_dir.mkdir()
    src = src_dir / "cat.png"
    src.write_bytes(b"png")

    def cross_device(source, target):
        raise OSError(errno.EXDEV, "Invalid cross-device link")

    monkeypatch.setattr(relocator.os, "link", cross_device)

    target = relocate(src, dest_dir)

    assert target.read_bytes() == b"png"
    assert not src.exists()


def test_copy_fallback_never_overwrites(tmp_path, monkeypatch):
    src_dir = tmp_path / "source"
    dest_dir = tmp_path / "destination"
    src_dir.mkdir()
    dest_dir.mkdir()
    src = src_dir / "cat.png"
    src.write_bytes(b"new")
    (dest_dir / "cat.png").write_bytes(b"archived")

    def cross_device(source, target):
        raise OSError(errno.EXDEV, "Invalid cross-device link")

    monkeypatch.setattr(relocator.os, "link", cross_device)

    with pytest.raises(RelocationError, match="already exists"):
        relocate(src, dest_dir)

    assert src.read_bytes() == b"new"
    assert (dest_dir / "cat.png").read_bytes() == b"archived"
