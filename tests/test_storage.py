"""Tests for local upload storage"""

import pytest

from leasedocs.errors import NotFoundError, ValidationError
from leasedocs.services.storage import FileStorage


class TestFileStorage:
    def test_save_read_delete(self, tmp_path):
        storage = FileStorage(root=str(tmp_path / "files"))
        url = storage.save("Lease.PDF", b"%PDF-1.4 data")
        assert url.startswith("/uploads/") and url.endswith(".pdf")
        assert storage.exists(url)
        assert storage.read(url) == b"%PDF-1.4 data"
        assert storage.delete(url)
        assert not storage.delete(url)
        with pytest.raises(NotFoundError):
            storage.read(url)

    @pytest.mark.parametrize("filename", ["photo.png", "notes.txt", "noextension"])
    def test_rejects_other_types(self, filename):
        with pytest.raises(ValidationError) as exc:
            FileStorage().save(filename, b"data")
        assert exc.value.field == "file"

    def test_rejects_empty_and_oversize(self, tmp_path):
        storage = FileStorage(root=str(tmp_path), max_bytes=10)
        with pytest.raises(ValidationError):
            storage.save("a.docx", b"")
        with pytest.raises(ValidationError):
            storage.save("a.docx", b"x" * 11)
        assert storage.save("a.docx", b"x" * 10)

    def test_default_limit_is_ten_megabytes(self):
        assert FileStorage().max_bytes == 10 * 1024 * 1024

    def test_url_cannot_escape_root(self, tmp_path):
        storage = FileStorage(root=str(tmp_path / "files"))
        (tmp_path / "secret.pdf").write_bytes(b"secret")
        assert not storage.exists("/uploads/../secret.pdf")
