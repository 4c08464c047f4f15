from abc import ABC, abstractmethod
from typing import Iterable, Mapping

from tiktok_br.schemas.listing import TikTokListing, as_listing


class BaseConnector(ABC):
    name: str

    @abstractmethod
    def fetch_listings(self) -> Iterable[Mapping]:  # pragma: no cover - interface
        """Yield raw product payloads already fetched from the shop."""

    def parse_listing(self, payload: Mapping) -> TikTokListing:
        return as_listing(payload)
