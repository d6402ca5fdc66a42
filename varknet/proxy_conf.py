"""Locations and defaults used by the DHCP proxy."""

from __future__ import annotations

import os
from pathlib import Path

# Where the cache and socket are stored by default
NETAVARK_PROXY_RUN_DIR = "/run/podman"

NETAVARK_PROXY_RUN_DIR_ENV = "NETAVARK_PROXY_RUN_DIR_ENV"

# Default UDS path for gRPC to communicate on.
DEFAULT_UDS_PATH = "/run/podman/nv-proxy.sock"
# Default configuration directory.
DEFAULT_CONFIG_DIR = ""
# Default network configuration path
DEFAULT_NETWORK_CONFIG = "/dev/stdin"
# Default wait time in seconds before the dhcp socket times out
DEFAULT_TIMEOUT = 8
# Proxy server socket file name
PROXY_SOCK_NAME = "nv-proxy.sock"
# Where leases are stored on the filesystem
CACHE_FILE_NAME = "nv-proxy.lease"
# Seconds of inactivity until the service exits
DEFAULT_INACTIVITY_TIMEOUT = 300


def get_run_dir(run_cli: str | None = None) -> str:
    """Return the run directory: environment first, then option, then default."""
    if NETAVARK_PROXY_RUN_DIR_ENV in os.environ:
        return os.environ[NETAVARK_PROXY_RUN_DIR_ENV]
    if run_cli is not None:
        return run_cli
    return NETAVARK_PROXY_RUN_DIR


def get_proxy_sock_fqname(run_dir_opt: str | None = None) -> Path:
    """Return the full path of the proxy socket file."""
    return Path(get_run_dir(run_dir_opt)) / PROXY_SOCK_NAME


def get_cache_fqname(run_dir: str | None = None) -> Path:
    """Return the full path of the lease cache file."""
    return Path(get_run_dir(run_dir)) / CACHE_FILE_NAME