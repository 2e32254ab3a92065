import logging
from pathlib import Path

from app.core.config import settings


logger = logging.getLogger(__name__)


class LocalFileStorage:
    """Stores uploaded files under a root directory on local disk.

    Paths handed to this class are relative to the root, e.g.
    ``<user id>/<invoice id>_payment_proof.pdf``.
    """

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root or settings.UPLOADS_DIR)

    def resolve(self, path: str) -> Path:
        full_path = (self.root / path).resolve()

        if self.root.resolve() not in full_path.parents:
            raise ValueError(f"Path escapes storage root: {path}")

        return full_path

    def save(self, path: str, content: bytes) -> Path:
        full_path = self.resolve(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)

        logger.debug("Stored %s bytes at %s", len(content), full_path)
        return full_path

    def delete(self, path: str) -> None:
        full_path = self.resolve(path)

        if full_path.exists():
            full_path.unlink()
            logger.debug("Deleted %s", full_path)

    def move(self, source: str, target: str) -> Path:
        source_path = self.resolve(source)
        target_path = self.resolve(target)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        source_path.replace(target_path)

        logger.debug("Moved %s to %s", source_path, target_path)
        return target_path

    def exists(self, path: str) -> bool:
        return self.resolve(path).is_file()


def get_file_storage() -> LocalFileStorage:
    return LocalFileStorage(settings.UPLOADS_DIR)
