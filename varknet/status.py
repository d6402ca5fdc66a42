"""Status codes for DHCP proxy requests and the errors that map onto them."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Code(enum.IntEnum):
    """Result codes carried by a proxy response status."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


@dataclass(frozen=True)
class Status:
    """The status of a failed proxy request: a code and a message."""

    code: Code
    message: str = ""

    def __str__(self) -> str:
        return f"status: {self.code.name}, message: {self.message!r}"


class DhcpServiceErrorKind(enum.Enum):
    """What went wrong while looking for a DHCP lease."""

    TIMEOUT = "timeout"
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_DHCP_SERVER_REPLY = "invalid_dhcp_server_reply"
    NO_LEASE = "no_lease"
    BUG = "bug"
    LEASE_EXPIRED = "lease_expired"
    UNIMPLEMENTED = "unimplemented"


_KIND_TO_CODE = {
    DhcpServiceErrorKind.TIMEOUT: Code.ABORTED,
    DhcpServiceErrorKind.INVALID_ARGUMENT: Code.INVALID_ARGUMENT,
    DhcpServiceErrorKind.NO_LEASE: Code.NOT_FOUND,
    DhcpServiceErrorKind.BUG: Code.INTERNAL,
}


class DhcpServiceError(Exception):
    """An error raised while obtaining or managing a DHCP lease."""

    def __init__(self, kind: DhcpServiceErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return self.message

    def to_status(self) -> Status:
        """Return the response status that reports this error to a client."""
        return Status(_KIND_TO_CODE.get(self.kind, Code.INTERNAL), self.message)


_EXIT_CODES = {
    Code.UNKNOWN: 155,
    Code.INVALID_ARGUMENT: 156,
    Code.NOT_FOUND: 6,
}


def exit_code_for_status(status: Status) -> int:
    """Return the exit code the proxy client terminates with for ``status``."""
    return _EXIT_CODES.get(status.code, 1)