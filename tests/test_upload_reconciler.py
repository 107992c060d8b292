"""Tests for upload reconciliation between storage and entry pointers."""

from pathlib import Path

import pytest

from mood_journal.domain.errors import InvalidMedia, NotFound, PersistenceError
from mood_journal.services.media import MediaStorage
from mood_journal.services.sniffer import ContentSniffer
from mood_journal.services.uploads import UploadReconciler
from tests.conftest import InMemoryEntryRepository, image_bytes, write_temp

OWNER = 3


@pytest.fixture
def storage(tmp_path: Path) -> MediaStorage:
    return MediaStorage(tmp_path / "uploads")


@pytest.fixture
def entries() -> InMemoryEntryRepository:
    return InMemoryEntryRepository()


@pytest.fixture
def reconciler(
    storage: MediaStorage, entries: InMemoryEntryRepository
) -> UploadReconciler:
    return UploadReconciler(sniffer=ContentSniffer(), storage=storage, entries=entries)


def _stored_files(storage: MediaStorage) -> list[str]:
    if not storage.upload_dir.exists():
        return []
    return sorted(path.name for path in storage.upload_dir.iterdir())


def test_reconcile_stores_photo_and_points_latest_entry(
    tmp_path: Path,
    reconciler: UploadReconciler,
    storage: MediaStorage,
    entries: InMemoryEntryRepository,
) -> None:
    entry = entries.create_entry(OWNER, "calm", "happy", None)
    content = image_bytes("PNG")
    temp = write_temp(tmp_path / "temp", content)

    result = reconciler.reconcile(OWNER, temp)

    assert result.filename.startswith(f"{OWNER}_")
    assert result.filename.endswith(".png")
    assert result.entry_id == entry.id
    assert entries.entries[entry.id].photo == result.filename
    assert storage.path_for(result.filename).read_bytes() == content
    assert not temp.exists()


def test_reconcile_uses_sniffed_extension_not_client_name(
    tmp_path: Path, reconciler: UploadReconciler, entries: InMemoryEntryRepository
) -> None:
    entries.create_entry(OWNER, "calm", "happy", None)
    temp = write_temp(tmp_path / "temp", image_bytes("GIF"), name="photo.jpg")

    result = reconciler.reconcile(OWNER, temp)

    assert result.filename.endswith(".gif")


@pytest.mark.parametrize(
    "content",
    [
        b"plain text",
        b"\xff\xd8\xff\xe0" + b"\x00" * 32,
        b"GIF89a" + b"\x01" * 3,
    ],
)
def test_reconcile_rejects_invalid_media_and_removes_temp(
    tmp_path: Path,
    reconciler: UploadReconciler,
    storage: MediaStorage,
    entries: InMemoryEntryRepository,
    content: bytes,
) -> None:
    entry = entries.create_entry(OWNER, "calm", "happy", None)
    temp = write_temp(tmp_path / "temp", content)

    with pytest.raises(InvalidMedia):
        reconciler.reconcile(OWNER, temp)

    assert not temp.exists()
    assert _stored_files(storage) == []
    assert entries.entries[entry.id].photo is None


def test_reconcile_replaces_and_deletes_previous_photo(
    tmp_path: Path,
    reconciler: UploadReconciler,
    storage: MediaStorage,
    entries: InMemoryEntryRepository,
) -> None:
    entry = entries.create_entry(OWNER, "calm", "happy", None)
    first = reconciler.reconcile(OWNER, write_temp(tmp_path / "temp", image_bytes()))

    second = reconciler.reconcile(
        OWNER, write_temp(tmp_path / "temp", image_bytes("PNG"))
    )

    assert second.previous_filename == first.filename
    assert entries.entries[entry.id].photo == second.filename
    assert _stored_files(storage) == [second.filename]


def test_failed_pointer_update_rolls_back_new_file_only(
    tmp_path: Path,
    reconciler: UploadReconciler,
    storage: MediaStorage,
    entries: InMemoryEntryRepository,
) -> None:
    entry = entries.create_entry(OWNER, "calm", "happy", None)
    first = reconciler.reconcile(OWNER, write_temp(tmp_path / "temp", image_bytes()))
    entries.fail_set_photo = True
    temp = write_temp(tmp_path / "temp", image_bytes("PNG"))

    with pytest.raises(PersistenceError):
        reconciler.reconcile(OWNER, temp)

    attempted = entries.set_photo_calls[-1][1]
    assert entries.entries[entry.id].photo == first.filename
    assert storage.exists(first.filename)
    assert not storage.exists(attempted)
    assert _stored_files(storage) == [first.filename]
    assert not temp.exists()


def test_failed_pointer_read_rolls_back_new_file(
    tmp_path: Path,
    reconciler: UploadReconciler,
    storage: MediaStorage,
    entries: InMemoryEntryRepository,
) -> None:
    entries.create_entry(OWNER, "calm", "happy", None)
    entries.fail_reads = True

    with pytest.raises(PersistenceError):
        reconciler.reconcile(OWNER, write_temp(tmp_path / "temp", image_bytes()))

    assert _stored_files(storage) == []


def test_explicit_entry_must_belong_to_owner(
    tmp_path: Path,
    reconciler: UploadReconciler,
    storage: MediaStorage,
    entries: InMemoryEntryRepository,
) -> None:
    foreign = entries.create_entry(OWNER + 1, "theirs", "sad", None)

    with pytest.raises(NotFound):
        reconciler.reconcile(
            OWNER, write_temp(tmp_path / "temp", image_bytes()), entry_id=foreign.id
        )

    assert _stored_files(storage) == []
    assert entries.entries[foreign.id].photo is None


def test_explicit_entry_is_targeted_over_latest(
    tmp_path: Path, reconciler: UploadReconciler, entries: InMemoryEntryRepository
) -> None:
    older = entries.create_entry(OWNER, "first", "ok", None)
    newer = entries.create_entry(OWNER, "second", "ok", None)

    result = reconciler.reconcile(
        OWNER, write_temp(tmp_path / "temp", image_bytes()), entry_id=older.id
    )

    assert entries.entries[older.id].photo == result.filename
    assert entries.entries[newer.id].photo is None


def test_upload_without_entry_is_kept_pending(
    tmp_path: Path,
    reconciler: UploadReconciler,
    storage: MediaStorage,
    entries: InMemoryEntryRepository,
) -> None:
    result = reconciler.reconcile(OWNER, write_temp(tmp_path / "temp", image_bytes()))

    assert result.entry_id is None
    assert storage.exists(result.filename)
    assert entries.set_photo_calls == []
