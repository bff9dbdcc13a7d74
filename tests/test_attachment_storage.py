import io

import pytest

from helpdesk.services.attachment_storage import AttachmentStorage


def test_save_writes_below_ticket_directory(tmp_path) -> None:
    storage = AttachmentStorage(tmp_path)

    name, path = storage.save(
        ticket_uid=1001,
        attachment_id="abc",
        filename="C:\\Users\\me\\report.pdf",
        stream=io.BytesIO(b"%PDF"),
    )

    assert name == "report.pdf"
    assert path == "tickets/1001/abc_report.pdf"
    assert (tmp_path / path).read_bytes() == b"%PDF"


def test_remove_returns_false_for_missing_file(tmp_path) -> None:
    storage = AttachmentStorage(tmp_path)

    assert storage.remove("tickets/1/missing.txt") is False


def test_remove_deletes_file(tmp_path) -> None:
    storage = AttachmentStorage(tmp_path)
    _, path = storage.save(
        ticket_uid=1, attachment_id="x", filename="a.txt", stream=io.BytesIO(b"a")
    )

    assert storage.remove(path) is True
    assert not (tmp_path / path).exists()


def test_paths_outside_root_are_refused(tmp_path) -> None:
    storage = AttachmentStorage(tmp_path / "public")

    with pytest.raises(ValueError):
        storage.remove("../secrets.txt")
