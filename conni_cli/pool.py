"""ClientPool — one lazily-built client handle per profile name."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from conni_cli._utils import log_event
from conni_cli.client import ConfluenceClient
from conni_cli.profiles import ProfileConfig, client_options


class ClientPool:
    """Cache of client handles keyed by profile name.

    Handles are built on first ``get()`` from ``client_options()`` via
    *factory* (``ConfluenceClient.from_options`` by default) and live until
    ``clear()``. The lock keeps lookup-or-create atomic per pool so two
    threads can never build two handles for one profile.
    """

    def __init__(
        self,
        profile_config: ProfileConfig,
        factory: Callable[[dict[str, Any]], Any] | None = None,
    ):
        self.profile_config = profile_config
        self._factory = factory or ConfluenceClient.from_options
        self._clients: dict[str, Any] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._clients)

    def __contains__(self, profile_name):
        return profile_name in self._clients

    def profiles(self) -> list[str]:
        """Profile names with a live handle, in creation order."""
        return list(self._clients)

    def get(self, profile_name: str):
        """Return the handle for *profile_name*, creating it on first use.

        Raises ProfileNotFoundError if the profile is not configured; the pool
        is left unchanged in that case.
        """
        with self._lock:
            client = self._clients.get(profile_name)
            if client is not None:
                return client
            options = client_options(self.profile_config, profile_name)
            client = self._factory(options)
            self._clients[profile_name] = client
        log_event("POOL", event="create", profile=profile_name, host=options["host"])
        return client

    def clear(self) -> None:
        """Close and forget every handle. Safe to call on an empty pool."""
        with self._lock:
            clients, self._clients = self._clients, {}
        for name, client in clients.items():
            close = getattr(client, "close", None)
            if callable(close):
                close()
            log_event("POOL", event="close", profile=name)

    def reset(self, profile_config: ProfileConfig) -> None:
        """Swap in a freshly loaded config; existing handles are closed."""
        self.clear()
        self.profile_config = profile_config
