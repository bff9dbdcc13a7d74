import logging
import shutil
from pathlib import Path, PurePosixPath
from typing import BinaryIO

logger = logging.getLogger(__name__)


class AttachmentStorage:
    """Stores ticket attachment files beneath a public root directory.

    Paths recorded on tickets are relative to the root, e.g.
    ``tickets/1000/<attachment id>_report.pdf``.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def save(
        self,
        *,
        ticket_uid: int,
        attachment_id: str,
        filename: str,
        stream: BinaryIO,
    ) -> tuple[str, str]:
        name = PurePosixPath(filename.replace("\\", "/")).name or "attachment"
        relative = PurePosixPath("tickets", str(ticket_uid), f"{attachment_id}_{name}")
        target = self._resolve(str(relative))
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("wb") as destination:
            shutil.copyfileobj(stream, destination)
        return name, str(relative)

    def remove(self, relative_path: str) -> bool:
        target = self._resolve(relative_path)
        if not target.is_file():
            return False
        target.unlink()
        logger.info("Removed attachment file %s", relative_path)
        return True

    def _resolve(self, relative_path: str) -> Path:
        root = self.root.resolve()
        target = (root / relative_path.lstrip("/")).resolve()
        if not target.is_relative_to(root):
            raise ValueError(f"Attachment path escapes storage root: {relative_path}")
        return target
