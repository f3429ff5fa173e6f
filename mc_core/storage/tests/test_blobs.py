import re

import pytest

from mc_core.common.exceptions import InputValidationError, TransientStorageError
from mc_core.storage.blobs import (
    IMAGE_TYPES,
    BlobStore,
    chat_attachment_path,
    doctor_document_path,
    profile_photo_path,
    safe_name,
)


class FlakyStorage:
    """
    Fails `failures` times with OSError, then stores in a dict.
    """

    def __init__(self, failures=0):
        self.failures = failures
        self.calls = 0
        self.files = {}

    def save(self, name, content):
        self.calls += 1
        if self.calls <= self.failures:
            raise OSError("connection reset")
        self.files[name] = content.read()
        return name

    def url(self, name):
        return f"/media/{name}"

    def exists(self, name):
        return name in self.files

    def delete(self, name):
        self.files.pop(name, None)


def _store(storage, sleeps, **kwargs):
    kwargs.setdefault("max_attempts", 3)
    return BlobStore(storage, base_delay=0.5, sleep=sleeps.append, **kwargs)


def test_transient_failures_are_retried():
    sleeps = []
    storage = FlakyStorage(failures=2)

    result = _store(storage, sleeps).upload("users/1/profile/a.png", b"png-bytes", content_type="image/png")

    assert result.path == "users/1/profile/a.png"
    assert result.url == "/media/users/1/profile/a.png"
    assert result.size == 9
    assert storage.files["users/1/profile/a.png"] == b"png-bytes"
    assert len(sleeps) == 2
    assert sleeps[0] >= 0.5
    assert sleeps[1] >= 1.0


def test_exhausted_retries_raise_transient_error():
    sleeps = []
    storage = FlakyStorage(failures=10)

    with pytest.raises(TransientStorageError) as exc:
        _store(storage, sleeps).upload("x.pdf", b"%PDF")

    assert storage.calls == 3
    assert len(sleeps) == 2
    assert exc.value.details["path"] == "x.pdf"


@pytest.mark.parametrize(
    "content, content_type, allowed",
    [
        (b"", "image/png", None),
        (b"x" * 2048, "image/png", None),
        (b"data", "application/zip", IMAGE_TYPES),
    ],
)
def test_validation_happens_before_any_write(content, content_type, allowed):
    storage = FlakyStorage()
    store = _store(storage, [], max_size_mb=0.001)

    with pytest.raises(InputValidationError):
        store.upload("f", content, content_type=content_type, allowed_types=allowed)
    assert storage.calls == 0


def test_progress_is_reported():
    progress = []
    _store(FlakyStorage(), []).upload("a.txt", b"hello", on_progress=lambda done, total: progress.append((done, total)))
    assert progress == [(0, 5), (5, 5)]


def test_delete_and_exists():
    storage = FlakyStorage()
    store = _store(storage, [])
    store.upload("a.txt", b"hello")

    assert store.exists("a.txt")
    store.delete("a.txt")
    assert not store.exists("a.txt")


def test_path_layout():
    assert safe_name("../../etc/my photo.jpg") == "my_photo.jpg"
    assert re.fullmatch(r"users/7/profile/\d+_me\.jpg", profile_photo_path(7, "me.jpg"))
    assert re.fullmatch(r"doctors/7/documents/\d+_license\.pdf", doctor_document_path(7, "license.pdf"))
    assert re.fullmatch(r"chats/1_2/images/\d+_x\.png", chat_attachment_path("1_2", "image", "x.png"))
    assert re.fullmatch(r"chats/1_2/files/\d+_notes\.txt", chat_attachment_path("1_2", "file", "notes.txt"))
