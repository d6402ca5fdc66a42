"""Container networking helpers: DHCP lease records and cache, aardvark-dns files, status codes and errors."""

__version__ = "0.1.0"

__all__ = [
    "aardvark",
    "cache",
    "commands",
    "error",
    "ip",
    "lease",
    "proxy_conf",
    "status",
]