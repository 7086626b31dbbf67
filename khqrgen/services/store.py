"""In-memory store holding the latest generated payload per merchant identity."""
from __future__ import annotations

import threading

from ..models import GeneratedPayload, MerchantIdentity


class LatestPayloadStore:
    """One last-write-wins slot per identity; lives as long as the process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._slots: dict[MerchantIdentity, GeneratedPayload | None] = {identity: None for identity in MerchantIdentity}

    def put(self, result: GeneratedPayload) -> None:
        with self._lock:
            self._slots[result.identity] = result

    def get(self, identity: MerchantIdentity) -> GeneratedPayload | None:
        with self._lock:
            return self._slots[identity]
