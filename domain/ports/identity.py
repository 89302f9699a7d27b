from abc import ABC, abstractmethod
from typing import Optional

from domain.models.identity import Caller


class IdentityProviderPort(ABC):
    @abstractmethod
    def resolve_caller(self, credential: Optional[str]) -> Optional[Caller]:
        """Returns the authenticated caller, or None for a missing or invalid credential."""
        pass
