import errno
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from archiver.storage.hasher import sha256_file
from archiver.storage.relocator import _verify_size, claim, relocate

_CROSS_DEVICE = OSError(errno.EXDEV, "Invalid cross-device link")


def _staged(tmp_path: Path, payload: bytes = b"video-bytes" * 1000) -> Path:
    staging = tmp_path / "incoming"
    staging.mkdir()
    source = staging / "abc123"
    source.write_bytes(payload)
    return source


class TestSameVolume:
    def test_renames(self, tmp_path: Path) -> None:
        source = _staged(tmp_path)
        dest = tmp_path / "archived.mov"

        assert relocate(source, dest) == "rename"
        assert dest.read_bytes() == b"video-bytes" * 1000
        assert not source.exists()

    def test_refuses_existing_destination(self, tmp_path: Path) -> None:
        source = _staged(tmp_path)
        dest = tmp_path / "archived.mov"
        dest.write_bytes(b"older upload")

        with pytest.raises(FileExistsError):
            relocate(source, dest)

        assert source.exists()
        assert dest.read_bytes() == b"older upload"


class TestCrossVolume:
    def test_falls_back_to_copy(self, tmp_path: Path) -> None:
        source = _staged(tmp_path)
        dest = tmp_path / "archived.mov"

        with patch("archiver.storage.relocator.os.rename", side_effect=_CROSS_DEVICE):
            assert relocate(source, dest) == "copy"

        assert dest.read_bytes() == b"video-bytes" * 1000
        assert not source.exists()

    def test_digest_unchanged(self, tmp_path: Path) -> None:
        source = _staged(tmp_path, payload=bytes(range(256)) * 4096)
        before = sha256_file(source)
        dest = tmp_path / "archived.mov"

        with patch("archiver.storage.relocator.os.rename", side_effect=_CROSS_DEVICE):
            relocate(source, dest)

        assert sha256_file(dest) == before

    def test_leaves_no_temp_file(self, tmp_path: Path) -> None:
        source = _staged(tmp_path)
        archive = tmp_path / "archive"
        archive.mkdir()

        with patch("archiver.storage.relocator.os.rename", side_effect=_CROSS_DEVICE):
            relocate(source, archive / "archived.mov")

        assert [p.name for p in archive.iterdir()] == ["archived.mov"]

    def test_failed_copy_keeps_source(self, tmp_path: Path) -> None:
        source = _staged(tmp_path)
        archive = tmp_path / "archive"
        archive.mkdir()

        with (
            patch("archiver.storage.relocator.os.rename", side_effect=_CROSS_DEVICE),
            patch(
                "archiver.storage.relocator._verify_size",
                side_effect=OSError("Copy incomplete"),
            ),
        ):
            with pytest.raises(OSError, match="Copy incomplete"):
                relocate(source, archive / "archived.mov")

        assert source.exists()
        assert list(archive.iterdir()) == []


class TestOtherErrors:
    def test_propagates_non_cross_device_error(self, tmp_path: Path) -> None:
        source = _staged(tmp_path)

        with patch(
            "archiver.storage.relocator.os.rename",
            side_effect=OSError(errno.EACCES, "Permission denied"),
        ):
            with pytest.raises(PermissionError):
                relocate(source, tmp_path / "archived.mov")

        assert source.exists()
        assert not (tmp_path / "archived.mov").exists()


class TestVerifySize:
    def test_matching_size_passes(self, tmp_path: Path) -> None:
        path = tmp_path / "f"
        path.write_bytes(b"12345")
        _verify_size(path, 5)

    def test_mismatch_raises_after_retry(self, tmp_path: Path) -> None:
        path = tmp_path / "f"
        path.write_bytes(b"123")

        with patch("archiver.storage.relocator.time.sleep") as mock_sleep:
            with pytest.raises(OSError, match="Copy incomplete"):
                _verify_size(path, 5)

        mock_sleep.assert_called_once()


class TestDestinationClaim:
    def test_claimed_name_blocks_second_upload(self, tmp_path: Path) -> None:
        source = _staged(tmp_path)
        dest = tmp_path / "archived.mov"
        claim(dest)

        with pytest.raises(FileExistsError):
            relocate(source, dest)

        assert source.exists()

    def test_upload_landing_mid_copy_is_refused(self, tmp_path: Path) -> None:
        source_a = _staged(tmp_path, payload=b"upload-A")
        source_b = tmp_path / "other"
        source_b.write_bytes(b"upload-B")
        dest = tmp_path / "archived.mov"
        competing: list[BaseException] = []
        real_copy2 = shutil.copy2

        def copy_while_competing(src: Path, dst: Path) -> object:
            try:
                relocate(source_b, dest)
            except FileExistsError as exc:
                competing.append(exc)
            return real_copy2(src, dst)

        with (
            patch("archiver.storage.relocator.os.rename", side_effect=_CROSS_DEVICE),
            patch("archiver.storage.relocator.shutil.copy2", side_effect=copy_while_competing),
        ):
            assert relocate(source_a, dest) == "copy"

        assert len(competing) == 1
        assert dest.read_bytes() == b"upload-A"
        assert source_b.read_bytes() == b"upload-B"

    def test_claim_creates_empty_placeholder(self, tmp_path: Path) -> None:
        dest = tmp_path / "archived.mov"
        claim(dest)
        assert dest.read_bytes() == b""
