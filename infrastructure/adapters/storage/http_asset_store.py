import logging

import httpx

from domain.models.team import Upload
from domain.ports.asset_store import AssetStorePort
from domain.exceptions import AssetUploadFailed


class HttpAssetStore(AssetStorePort):
    """
    Posts the binary as multipart form data to an upload endpoint (Cloudinary
    style) and reads the URL back from the JSON answer.
    """

    def __init__(self, upload_url: str, timeout: float = 30.0, client: httpx.Client = None):
        self.upload_url = upload_url
        self.timeout = timeout
        self.client = client or httpx.Client(timeout=timeout)
        self.logger = logging.getLogger(__name__)

    def store(self, upload: Upload) -> str:
        try:
            response = self.client.post(
                self.upload_url,
                files={"file": (upload.filename, upload.data, upload.content_type)},
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Upload of {upload.filename} to {self.upload_url} failed: {e}")
            raise AssetUploadFailed(upload.filename, str(e)) from e

        url = (body.get("secure_url") or body.get("url")) if isinstance(body, dict) else None
        if not url:
            raise AssetUploadFailed(upload.filename, "upload endpoint returned no url")
        return url
