"""Configuration files and process control for the aardvark-dns server."""

from __future__ import annotations

import fcntl
import logging
import os
import re
import signal
import subprocess
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address
from pathlib import Path
from typing import IO, Union

from varknet.error import NetavarkError, wrap

_log = logging.getLogger(__name__)

SYSTEMD_CHECK_PATH = "/run/systemd/system"
SYSTEMD_RUN = "systemd-run"
AARDVARK_COMMIT_LOCK = "aardvark.lock"
AARDVARK_PID_FILE = "aardvark.pid"

_PID_PATTERN = re.compile(r"[+-]?\d+")

IpAddress = Union[IPv4Address, IPv6Address, str]


def _io_error(error: OSError) -> NetavarkError:
    converted = NetavarkError(f"IO error: {error}")
    converted.__cause__ = error
    return converted


def _joined(values: Iterable[object]) -> str:
    return ",".join(str(value) for value in values)


def _optional_servers(servers: Sequence[object] | None) -> str:
    if not servers:
        return ""
    return f" {_joined(servers)}"


def _lines(content: str) -> list[str]:
    """Split on newlines, dropping the empty piece after a trailing newline."""
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _rust_log_level() -> str:
    level = logging.getLogger("varknet").getEffectiveLevel()
    if level <= 5:
        return "TRACE"
    if level <= logging.DEBUG:
        return "DEBUG"
    if level <= logging.INFO:
        return "INFO"
    if level <= logging.WARNING:
        return "WARN"
    if level <= logging.ERROR:
        return "ERROR"
    return "OFF"


@dataclass
class AardvarkEntry:
    """The DNS records of one container on one network."""

    network_name: str
    container_id: str
    network_gateways: list[IpAddress] = field(default_factory=list)
    network_dns_servers: list[IpAddress] | None = None
    container_ips_v4: list[IPv4Address | str] = field(default_factory=list)
    container_ips_v6: list[IPv6Address | str] = field(default_factory=list)
    container_names: list[str] = field(default_factory=list)
    container_dns_servers: list[IpAddress] | None = None


@dataclass
class Aardvark:
    """Manages the aardvark-dns configuration directory and server process."""

    config: str
    rootless: bool
    aardvark_bin: str
    port: str

    def __init__(self, config: str, rootless: bool, aardvark_bin: str, port: int | str) -> None:
        self.config = str(config)
        self.rootless = rootless
        self.aardvark_bin = str(aardvark_bin)
        self.port = str(port)

    @property
    def config_path(self) -> Path:
        return Path(self.config)

    def _get_aardvark_pid(self) -> int:
        path = self.config_path / AARDVARK_PID_FILE
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as error:
            raise _io_error(error) from error
        if not _PID_PATTERN.fullmatch(content):
            raise NetavarkError("parse aardvark pid: invalid digit found in string")
        return int(content)

    @staticmethod
    def _is_executable_in_path(program: str) -> bool:
        search = os.environ.get("PATH")
        if search is None:
            return False
        return any(os.path.exists(f"{directory}/{program}") for directory in search.split(":"))

    def start_aardvark_server(self) -> None:
        """Start the server, under a systemd scope when systemd is booted."""
        _log.debug("Spawning aardvark server")
        args: list[str] = []
        if Path(SYSTEMD_CHECK_PATH).exists() and self._is_executable_in_path(SYSTEMD_RUN):
            args = [SYSTEMD_RUN, "-q", "--scope"]
            if self.rootless:
                args.append("--user")
        args += [self.aardvark_bin, "--config", self.config, "-p", self.port, "run"]
        _log.debug("start aardvark-dns: %r", args)
        env = dict(os.environ, RUST_LOG=_rust_log_level())
        # The command returns once the server has daemonized; its exit status is not checked.
        subprocess.run(args, env=env, check=False)

    def notify(self, start: bool) -> None:
        """Ask a running server to reload, or start one when ``start`` is set."""
        try:
            pid = self._get_aardvark_pid()
        except NetavarkError as error:
            if not start:
                raise wrap("failed to get aardvark pid", error) from error
        else:
            try:
                os.kill(pid, signal.SIGHUP)
                return
            except ProcessLookupError:
                pass
            except OSError as error:
                raise NetavarkError(f"failed to send SIGHUP to aardvark: {error}") from error
        try:
            self.start_aardvark_server()
        except OSError as error:
            raise _io_error(error) from error

    def _open_network_file(self, entry: AardvarkEntry) -> IO[str]:
        path = self.config_path / entry.network_name
        try:
            handle = open(path, "x", encoding="utf-8")
        except FileExistsError:
            return open(path, "a", encoding="utf-8")
        try:
            header = _joined(entry.network_gateways) + _optional_servers(entry.network_dns_servers)
            handle.write(f"{header}\n")
        except BaseException:
            handle.close()
            raise
        return handle

    @staticmethod
    def _commit_entry(entry: AardvarkEntry, handle: IO[str]) -> None:
        line = "{} {} {} {}{}\n".format(
            entry.container_id,
            _joined(entry.container_ips_v4),
            _joined(entry.container_ips_v6),
            ",".join(entry.container_names),
            _optional_servers(entry.container_dns_servers),
        )
        handle.write(line)
        handle.flush()

    @staticmethod
    def _unlock(fd: int, lockfile_path: Path) -> None:
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        except OSError as error:
            raise OSError(
                f"Failed to unlock exclusive lock on {str(lockfile_path)!r}: {error}"
            ) from error

    def commit_entries(self, entries: Iterable[AardvarkEntry]) -> None:
        """Append the entries to their network files while holding the commit lock."""
        lockfile_path = self.config_path / ".." / AARDVARK_COMMIT_LOCK
        try:
            fd = os.open(lockfile_path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as error:
            raise OSError(
                f"Failed to open/create lockfile {str(lockfile_path)!r}: {error}"
            ) from error
        try:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX)
            except OSError as error:
                raise OSError(
                    f"Failed to acquire exclusive lock on {str(lockfile_path)!r}: {error}"
                ) from error
            for entry in entries:
                with self._open_network_file(entry) as handle:
                    try:
                        self._commit_entry(entry, handle)
                    except OSError as error:
                        self._unlock(fd, lockfile_path)
                        raise OSError(f"Failed to commit entry {entry!r}: {error}") from error
            self._unlock(fd, lockfile_path)
        finally:
            os.close(fd)

    def commit_netavark_entries(self, entries: Sequence[AardvarkEntry]) -> None:
        """Commit the entries and notify the server; nothing happens for no entries."""
        if not entries:
            return
        try:
            self.commit_entries(entries)
        except OSError as error:
            raise _io_error(error) from error
        self.notify(True)

    def delete_entry(self, container_id: str, network_name: str) -> None:
        """Remove a container's lines; drop the file when only the header is left."""
        path = self.config_path / network_name
        content = path.read_text(encoding="utf-8")
        kept = [line for line in _lines(content) if container_id not in line]
        with open(path, "w", encoding="utf-8") as handle:
            handle.writelines(f"{line}\n" for line in kept)
        if len(kept) <= 1:
            path.unlink()

    def modify_network_dns_servers(
        self, network_name: str, network_dns_servers: Sequence[str]
    ) -> None:
        """Replace the network DNS servers in the header of a network file.

        A missing network file is not an error: no container on that
        network is running.
        """
        path = self.config_path / network_name
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return
        except OSError as error:
            raise _io_error(error) from error

        modified = bool(network_dns_servers)
        try:
            with open(path, "w", encoding="utf-8") as handle:
                for index, line in enumerate(_lines(content)):
                    if index == 0:
                        bind_ips = line.split(" ")[0]
                        line = bind_ips + _optional_servers(list(network_dns_servers))
                    handle.write(f"{line}\n")
        except OSError as error:
            raise _io_error(error) from error

        if modified:
            self.notify(False)

    def delete_from_netavark_entries(self, entries: Iterable[AardvarkEntry]) -> None:
        """Delete every entry and notify the running server."""
        for entry in entries:
            try:
                self.delete_entry(entry.container_id, entry.network_name)
            except OSError as error:
                raise _io_error(error) from error
        self.notify(False)