from __future__ import annotations

import base64
import os
import time

import pytest

from roster.services.photo_service import PhotoError, PhotoService, run_photo_cleanup


def test_save_photo_from_data_url(photos, png_base64, png_bytes):
    url = photos.save_photo(f"data:image/png;base64,{png_base64}", file_name="My Photo!.PNG")

    name = url.rsplit("/", 1)[-1]
    assert url.startswith("/photos/My-Photo_")
    assert name.endswith(".png")
    assert (photos.photo_dir / name).read_bytes() == png_bytes


def test_save_photo_uses_explicit_mime_type(photos, png_base64):
    url = photos.save_photo(png_base64, "image/jpeg")
    assert url.endswith(".jpg")


def test_save_photo_defaults_stem(photos, png_base64):
    url = photos.save_photo(png_base64, "image/png")
    assert url.startswith("/photos/photo_")


def test_decode_rejects_unknown_type(photos, png_base64):
    with pytest.raises(PhotoError, match="Unsupported image type: unknown"):
        photos.decode(png_base64)


def test_decode_rejects_invalid_base64(photos):
    with pytest.raises(PhotoError, match="not valid base64"):
        photos.decode("@@@not base64@@@", "image/png")


def test_decode_rejects_empty_payload(photos):
    with pytest.raises(PhotoError, match="empty"):
        photos.decode("", "image/png")


def test_decode_rejects_large_payload(photos):
    data = base64.b64encode(b"\x00" * 2048).decode("ascii")
    with pytest.raises(PhotoError, match="Photo too large"):
        photos.decode(data, "image/png")


def _touch(path, age_days: float) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"img")
    stamp = time.time() - age_days * 86400
    os.utime(path, (stamp, stamp))


def test_cleanup_removes_only_old_unreferenced(photos):
    _touch(photos.photo_dir / "old.png", 40)
    _touch(photos.photo_dir / "kept.png", 40)
    _touch(photos.photo_dir / "fresh.png", 1)

    removed = photos.cleanup_stale_photos({"/photos/kept.png"}, 30)

    assert removed == ["old.png"]
    assert sorted(p.name for p in photos.photo_dir.iterdir()) == ["fresh.png", "kept.png"]


def test_cleanup_dry_run_keeps_files(photos):
    _touch(photos.photo_dir / "old.png", 40)

    removed = photos.cleanup_stale_photos(set(), 30, dry_run=True)

    assert removed == ["old.png"]
    assert (photos.photo_dir / "old.png").exists()


def test_cleanup_without_directory(tmp_path):
    service = PhotoService(tmp_path / "missing")
    assert service.cleanup_stale_photos(set(), 30) == []


def test_run_photo_cleanup_uses_roster_references(roster, photos):
    _touch(photos.photo_dir / "sam.png", 90)
    _touch(photos.photo_dir / "orphan.png", 90)
    roster.add_employee({"empId": "B1", "photoUrl": "/photos/sam.png"})

    assert run_photo_cleanup(roster, photos, 30) == ["orphan.png"]


def test_from_settings():
    from roster.core.config import Settings

    service = PhotoService.from_settings(
        Settings(PHOTO_DIR="/tmp/roster-photos", PHOTO_URL_PREFIX="/media/", PHOTO_MAX_BYTES=10)
    )

    assert str(service.photo_dir) == "/tmp/roster-photos"
    assert service.url_prefix == "/media"
    assert service.max_bytes == 10
