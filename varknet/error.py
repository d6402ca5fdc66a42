"""Error types shared across the package."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator

_MULTIPLE_ERRORS_HEADER = "netavark encountered multiple errors:"


class NetavarkError(Exception):
    """The main error type.

    An error is a plain message (optionally carrying a process exit code),
    a message chained onto an inner error, or a flat list of errors.
    """

    def __init__(
        self,
        message: str = "",
        exit_code: int = 1,
        *,
        cause: NetavarkError | None = None,
        errors: Iterable[NetavarkError] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.cause = cause
        self.errors: tuple[NetavarkError, ...] | None = (
            tuple(errors) if errors is not None else None
        )
        if cause is not None:
            self.__cause__ = cause

    @property
    def is_list(self) -> bool:
        return self.errors is not None

    def __str__(self) -> str:
        if self.errors is not None:
            if len(self.errors) == 1:
                return str(self.errors[0])
            return _MULTIPLE_ERRORS_HEADER + "".join(
                f"\n\t- {error}" for error in self.errors
            )
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"

    def print_json(self) -> None:
        """Print the error as the JSON object callers expect on stdout."""
        print(json.dumps({"error": str(self)}, separators=(",", ":"), ensure_ascii=False))

    def get_exit_code(self) -> int:
        """Return the exit code the process should terminate with."""
        return self.exit_code

    def unwrap(self) -> NetavarkError:
        """Follow the chain of wrapped errors down to the innermost one."""
        error = self
        while error.cause is not None:
            error = error.cause
        return error


def _coerce(error: BaseException) -> NetavarkError:
    """Turn any exception into a NetavarkError, keeping the original as cause."""
    if isinstance(error, NetavarkError):
        return error
    if isinstance(error, json.JSONDecodeError):
        converted = NetavarkError(f"JSON Decoding error: {error}")
    elif isinstance(error, OSError):
        converted = NetavarkError(f"IO error: {error}")
    else:
        converted = NetavarkError(str(error))
    converted.__cause__ = error
    return converted


def wrap(msg: str, error: BaseException) -> NetavarkError:
    """Return a new error that prefixes ``error`` with ``msg``."""
    return NetavarkError(msg, cause=_coerce(error))


class NetavarkErrorList:
    """Collects errors so cleanup can continue before reporting all of them."""

    def __init__(self, errors: Iterable[BaseException] = ()) -> None:
        self._errors: list[NetavarkError] = []
        for error in errors:
            self.push(error)

    def push(self, error: BaseException) -> None:
        """Add an error; nested lists are flattened into this one."""
        converted = _coerce(error)
        if converted.errors is not None:
            self._errors.extend(converted.errors)
        else:
            self._errors.append(converted)

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self) -> Iterator[NetavarkError]:
        return iter(self._errors)

    def to_error(self) -> NetavarkError | None:
        """Return a single error holding the collected ones, or None if empty."""
        if not self._errors:
            return None
        return NetavarkError(errors=self._errors)