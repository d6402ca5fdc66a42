"""The update and version commands."""

from __future__ import annotations

import json
import logging
import os
import platform
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from varknet.aardvark import Aardvark
from varknet.error import NetavarkError, wrap

_log = logging.getLogger(__name__)

_DIST_NAME = "varknet"


@dataclass
class Update:
    """Updates the DNS servers of an already configured network."""

    network_name: str
    network_dns_servers: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.network_name:
            raise NetavarkError("network name must not be empty")
        self.network_dns_servers = list(self.network_dns_servers)

    def exec(
        self,
        config_dir: str | None,
        aardvark_bin: str,
        rootless: bool,
        dns_port: int,
    ) -> None:
        """Apply the new servers to the aardvark configuration, if aardvark is installed."""
        if Path(aardvark_bin).exists():
            if config_dir is None:
                raise NetavarkError("dns is requested but --config not specified")
            path = Path(config_dir) / "aardvark-dns"
            aardvark = Aardvark(str(path), rootless, aardvark_bin, dns_port)
            # an empty value on the command line means "no servers"
            if self.network_dns_servers == [""]:
                self.network_dns_servers = []
            try:
                aardvark.modify_network_dns_servers(self.network_name, self.network_dns_servers)
            except (NetavarkError, OSError) as error:
                raise wrap("unable to modify network dns servers", error) from error
        _log.debug("Network update complete")


def _package_version() -> str:
    try:
        return version(_DIST_NAME)
    except PackageNotFoundError:
        return "0.0.0"


def _build_time() -> str:
    epoch = os.environ.get("SOURCE_DATE_EPOCH")
    if epoch is not None:
        try:
            return datetime.fromtimestamp(int(epoch), tz=timezone.utc).isoformat()
        except (ValueError, OverflowError, OSError):
            pass
    return datetime.now(tz=timezone.utc).isoformat()


def _target() -> str:
    return f"{platform.machine() or 'unknown'}-{sys.platform}"


def version_info() -> dict[str, str]:
    """Return the version, commit, build time and target of this program."""
    return {
        "version": _package_version(),
        "commit": os.environ.get("GIT_COMMIT", ""),
        "build_time": _build_time(),
        "target": _target(),
    }


def print_version() -> None:
    """Print the version information as pretty JSON."""
    print(json.dumps(version_info(), indent=2, ensure_ascii=False))