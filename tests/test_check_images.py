import logging
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
from image_factory import encoded_image, png_header
from services.admission_service import Limits
from services.guard_service import ImageGuard
from tools.check_images import check, main


def _write(path: Path, data: bytes) -> Path:
    path.write_bytes(data)
    return path


def test_all_images_within_limits(tmp_path):
    paths = [
        _write(tmp_path / "a.png", encoded_image("RGBA", (20, 10))),
        _write(tmp_path / "b.jpg", encoded_image("RGB", (8, 8), fmt="JPEG")),
    ]
    assert check(paths, ImageGuard(Limits(max_width=20))) == []
    assert main([str(p) for p in paths]) == 0


def test_rejected_image_fails(tmp_path, caplog):
    good = _write(tmp_path / "good.png", encoded_image("L", (10, 10)))
    bomb = _write(tmp_path / "bomb.png", png_header(50_000, 50_000))
    with caplog.at_level(logging.ERROR):
        assert main([str(good), str(bomb), "--max-memory", str(4 * 1024 * 1024)]) == 1
    assert "bomb.png" in caplog.text
    assert "required memory" in caplog.text
    assert "good.png" not in caplog.text


def test_unreadable_and_missing_files(tmp_path):
    junk = _write(tmp_path / "junk.png", b"not a png")
    errors = check([junk, tmp_path / "missing.png"], ImageGuard(Limits.unlimited()))
    assert len(errors) == 2
    assert "decoding config" in errors[0]
    assert "cannot read file" in errors[1]


def test_negative_limit_is_usage_error(tmp_path):
    good = _write(tmp_path / "good.png", encoded_image("L", (10, 10)))
    assert main([str(good), "--max-width", "-5"]) == 2
