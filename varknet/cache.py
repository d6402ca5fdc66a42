"""In-memory lease cache mirrored to a writable stream."""

from __future__ import annotations

import copy
import io
import json
import logging
from collections.abc import Iterator
from typing import IO, Any

from varknet.lease import Lease

_log = logging.getLogger(__name__)


class LeaseCache:
    """Holds the leases per container MAC address and mirrors them to ``writer``.

    The writer is any seekable, truncatable stream, text or binary; in
    production it is the lease file, in tests an in-memory buffer.  Every
    change rewrites the whole stream with the JSON form of the cache.
    """

    def __init__(self, writer: IO[Any]) -> None:
        self.writer = writer
        self._mem: dict[str, list[Lease]] = {}

    def add_lease(self, mac_addr: str, lease: Lease) -> None:
        """Store a new lease for ``mac_addr`` and write the cache out."""
        _log.debug("add lease: %r", mac_addr)
        self._mem[mac_addr] = [copy.deepcopy(lease)]
        self._save()

    def update_lease(self, mac_addr: str, lease: Lease) -> None:
        """Replace the lease for ``mac_addr`` and write the cache out."""
        self._mem[mac_addr] = [copy.deepcopy(lease)]
        self._save()

    def remove_lease(self, mac_addr: str) -> Lease:
        """Remove and return the lease for ``mac_addr``.

        A blank lease is returned, and nothing is written, when no lease
        is stored under that address.
        """
        _log.debug("remove lease: %r", mac_addr)
        leases = self._mem.pop(mac_addr, None)
        if leases is None:
            return Lease()
        self._save()
        return leases[0]

    def teardown(self) -> None:
        """Drop every lease and write the empty cache out."""
        self._mem.clear()
        self._save()

    def get(self, mac_addr: str) -> Lease | None:
        """Return the lease stored for ``mac_addr``, if any."""
        leases = self._mem.get(mac_addr)
        return copy.deepcopy(leases[0]) if leases else None

    def __len__(self) -> int:
        return len(self._mem)

    def __contains__(self, mac_addr: object) -> bool:
        return mac_addr in self._mem

    def __iter__(self) -> Iterator[str]:
        return iter(self._mem)

    def _clear_writer(self) -> None:
        self.writer.seek(0)
        self.writer.truncate(0)

    def _save(self) -> None:
        try:
            self._clear_writer()
        except (OSError, ValueError) as error:
            _log.error(
                "Could not clear the writer. Not updating lease information: %s",
                error,
            )
            return
        payload = json.dumps(
            {mac: [lease.to_dict() for lease in leases] for mac, leases in self._mem.items()},
            separators=(",", ":"),
            ensure_ascii=False,
        )
        if isinstance(self.writer, io.TextIOBase):
            self.writer.write(payload)
        else:
            self.writer.write(payload.encode("utf-8"))
        self.writer.flush()