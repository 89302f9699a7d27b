from abc import ABC, abstractmethod

from domain.models.team import Upload


class AssetStorePort(ABC):
    @abstractmethod
    def store(self, upload: Upload) -> str:
        """Stores the binary and returns its public URL. Raises AssetUploadFailed."""
        pass
