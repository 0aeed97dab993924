"""Read-only directory of stylists available for consultation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from .config import DEFAULT_PROVIDERS
from .models import Provider


class ProviderDirectory:
    """Ordered, immutable collection of providers keyed by id."""

    def __init__(self, providers: Iterable[Provider]) -> None:
        self._providers: tuple[Provider, ...] = tuple(providers)
        self._by_id = {provider.id: provider for provider in self._providers}

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ProviderDirectory:
        entries = config.get("providers") or DEFAULT_PROVIDERS
        return cls(Provider.from_config(entry) for entry in entries)

    def __iter__(self) -> Iterator[Provider]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def get(self, provider_id: int) -> Provider | None:
        """Return the provider with ``provider_id`` or ``None``."""
        return self._by_id.get(provider_id)

    def online(self) -> list[Provider]:
        return [provider for provider in self._providers if provider.is_online]
