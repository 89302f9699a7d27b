import logging
import re
from pathlib import Path
from uuid import uuid4

from domain.models.team import Upload
from domain.ports.asset_store import AssetStorePort
from domain.exceptions import AssetUploadFailed

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class LocalAssetStore(AssetStorePort):
    """Writes binaries under `root` and serves them from `base_url`."""

    def __init__(self, root: str, base_url: str = "/uploads"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.logger = logging.getLogger(__name__)

    def store(self, upload: Upload) -> str:
        name = _UNSAFE.sub("_", Path(upload.filename or "upload").name).strip("._") or "upload"
        stored_name = f"{uuid4().hex}_{name}"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / stored_name).write_bytes(upload.data)
        except OSError as e:
            self.logger.error(f"Could not write {stored_name}: {e}")
            raise AssetUploadFailed(upload.filename, str(e)) from e

        self.logger.info(f"Stored {upload.filename} as {stored_name} ({upload.size} bytes)")
        return f"{self.base_url}/{stored_name}"
