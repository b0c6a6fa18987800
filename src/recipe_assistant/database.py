"""Process-wide Supabase client handle."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from supabase import Client, create_client

_logger = logging.getLogger(__name__)


@dataclass
class LazySupabaseClient:
    """Create the Supabase client on first use and reuse it afterwards.

    A failed creation is not cached, so the next call tries again.
    """

    url: str
    key: str
    factory: Callable[[str, str], Client] = create_client
    _client: Client | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def get(self) -> Client:
        """Return the shared client, creating it if needed."""
        if self._client is not None:
            return self._client
        with self._lock:
            if self._client is None:
                try:
                    self._client = self.factory(self.url, self.key)
                except Exception:
                    _logger.exception("Failed to create Supabase client")
                    raise
                _logger.info("Supabase client initialised")
            return self._client

    def table(self, name: str):  # type: ignore[no-untyped-def]
        """Return a query builder for a table on the shared client."""
        return self.get().table(name)

    @property
    def auth(self):  # type: ignore[no-untyped-def]
        """Return the auth API of the shared client."""
        return self.get().auth

    def rpc(self, fn: str, params: dict[str, object]):  # type: ignore[no-untyped-def]
        """Return a call builder for a Postgres function on the shared client."""
        return self.get().rpc(fn, params)


SupabaseHandle = Client | LazySupabaseClient
