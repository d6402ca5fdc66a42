# varknet

varknet holds host-side pieces of a container network setup:

- the records and the on-disk lease cache used by a DHCP lease proxy,
- the configuration files read by the aardvark-dns server, and control of
  that server process,
- one error type that can be reported as JSON to the calling program.

It has no dependencies outside the standard library. It needs a POSIX
system, because `varknet.aardvark` uses `fcntl` file locks and signals.

## Installation

Install the package with your usual tool. The `test` extra adds pytest for
running the test suite.

## Modules

| Module               | Contents                                                                  |
|----------------------|---------------------------------------------------------------------------|
| `varknet.error`      | `NetavarkError`, `NetavarkErrorList`, `wrap()`                            |
| `varknet.proxy_conf` | Default locations and timeouts of the lease proxy                         |
| `varknet.lease`      | `Lease`, `NetworkConfig`, `ProxyError`, address list helpers              |
| `varknet.ip`         | Subnet mask and gateway parsing, `MacVlan` built from a lease             |
| `varknet.cache`      | `LeaseCache`: leases in memory, mirrored as JSON to a stream              |
| `varknet.aardvark`   | `Aardvark`, `AardvarkEntry`: aardvark-dns files and server process        |
| `varknet.commands`   | `Update` for network DNS servers, `version_info()`, `print_version()`     |
| `varknet.status`     | `Code`, `Status`, `DhcpServiceError`, `exit_code_for_status()`            |

## Errors

`NetavarkError` is an exception that holds a message and an exit code
(1 unless you give one). It can also hold a cause or a list of errors.

- `wrap(msg, error)` returns a new error whose text is `"msg: <error>"`.
  Any exception can be wrapped. An `OSError` shows as `IO error: ...` and a
  JSON decoding error shows as `JSON Decoding error: ...`.
- `unwrap()` follows the chain of wrapped errors down to the innermost one.
- `get_exit_code()` returns the exit code.
- `print_json()` prints `{"error":"..."}` on standard output.

`NetavarkErrorList` collects errors so that a cleanup can go on after a
failure. `push()` flattens nested lists. `to_error()` returns `None` when
the list is empty and otherwise one `NetavarkError` holding all the errors.
With a single error its text is that error's text. With several the text is
`netavark encountered multiple errors:` followed by one `\n\t- ...` line for
each error.

```python
from varknet.error import NetavarkError, NetavarkErrorList, wrap

errors = NetavarkErrorList()
errors.push(NetavarkError("first problem"))
errors.push(wrap("tearing down network", NetavarkError("second problem")))

failure = errors.to_error()
if failure is not None:
    failure.print_json()
```

## Proxy locations

```python
from varknet.proxy_conf import get_run_dir, get_proxy_sock_fqname, get_cache_fqname

get_run_dir(None)                    # "/run/podman" unless NETAVARK_PROXY_RUN_DIR_ENV is set
get_proxy_sock_fqname("/tmp/proxy")  # Path("/tmp/proxy/nv-proxy.sock")
get_cache_fqname("/tmp/proxy")       # Path("/tmp/proxy/nv-proxy.lease")
```

If the environment variable `NETAVARK_PROXY_RUN_DIR_ENV` is set, it wins
over the directory you pass in. The module also defines the defaults
`DEFAULT_UDS_PATH`, `DEFAULT_NETWORK_CONFIG`, `DEFAULT_TIMEOUT` (8 seconds)
and `DEFAULT_INACTIVITY_TIMEOUT` (300 seconds).

## Leases and network configurations

`Lease` and `NetworkConfig` are dataclasses. `to_dict()` turns them into
plain dictionaries. `from_dict()` builds them again, and raises `ProxyError`
when a field is missing or has the wrong type. `NetworkConfig.load(path)`
reads a JSON network configuration from a file.

```python
from varknet.lease import handle_ip_vectors, to_v4_addrs, to_v6_addrs

to_v4_addrs([])              # None
to_v4_addrs(["10.1.0.1"])    # [IPv4Address("10.1.0.1")]
handle_ip_vectors(None)      # []
```

`to_v4_addrs()` and `to_v6_addrs()` raise `ProxyError` for a malformed
address.

## Interface addresses from a lease

```python
from varknet.ip import MacVlan, get_prefix_length_v4, handle_gws

get_prefix_length_v4("255.255.255.0")                       # 24
handle_gws(["192.168.1.1", "10.10.10.1"], "255.255.255.0")  # IPv4Interface objects with prefix 24
```

`get_prefix_length_v4()` and `handle_gws()` raise `ProxyError` for a
malformed netmask or gateway. `MacVlan.from_lease(lease, interface)` takes
the address, gateways and prefix length from a lease. It raises
`ProxyError` when any of them cannot be parsed.

## Lease cache

`LeaseCache(writer)` keeps one lease for each container MAC address. The
writer is any seekable, truncatable text or binary stream, such as an open
file or an `io.BytesIO`. `add_lease()`, `update_lease()`, `teardown()` and a
`remove_lease()` that removes something each rewrite the whole stream as
JSON, mapping each MAC address to a list with its lease. `remove_lease()`
for an unknown address returns an empty `Lease` and writes nothing.
`len(cache)`, `mac in cache`, iteration over the addresses and `get(mac)`
show what is stored.

## aardvark-dns configuration

`Aardvark(config, rootless, aardvark_bin, port)` manages one configuration
directory. Each network has one file in it: a header line with the gateways
and optional network DNS servers, then one line for each container.

- `commit_netavark_entries(entries)` appends `AardvarkEntry` records. It
  holds an exclusive lock on `aardvark.lock` in the parent directory while it
  writes. It then sends `SIGHUP` to the server whose pid is in
  `aardvark.pid`, and starts the server if there is no pid file or no such
  process. The server runs under `systemd-run --scope` when systemd is booted
  and `systemd-run` is on `PATH`. An empty list does nothing.
- `delete_from_netavark_entries(entries)` removes every line that contains
  the container id. A file left with only its header is deleted. The running
  server is then notified. It is an error if it cannot be found.
- `modify_network_dns_servers(network_name, servers)` rewrites the DNS
  servers in the header line. A missing network file is not an error. The
  server is notified only when the new list is not empty.

## Commands

`Update(network_name, network_dns_servers).exec(config_dir, aardvark_bin,
rootless, dns_port)` applies new network DNS servers inside
`<config_dir>/aardvark-dns`. If `aardvark_bin` does not exist it does
nothing. A single empty string for the servers means "no servers".

`version_info()` returns a dictionary with these keys:

- `version`: the installed package version.
- `commit`: the `GIT_COMMIT` environment variable.
- `build_time`: taken from `SOURCE_DATE_EPOCH`, or the current time.
- `target`: the machine and platform.

`print_version()` prints that dictionary as indented JSON.

## Status codes

`DhcpServiceError(kind, message).to_status()` maps a failure onto a
`Status`:

| `DhcpServiceErrorKind` | `Code`             |
|------------------------|--------------------|
| `TIMEOUT`              | `ABORTED`          |
| `INVALID_ARGUMENT`     | `INVALID_ARGUMENT` |
| `NO_LEASE`             | `NOT_FOUND`        |
| any other kind         | `INTERNAL`         |

`exit_code_for_status(status)` gives the exit code for a failed request:

| Status code        | Exit code |
|--------------------|-----------|
| `UNKNOWN`          | 155       |
| `INVALID_ARGUMENT` | 156       |
| `NOT_FOUND`        | 6         |
| any other code     | 1         |

## What the package does not do

The package has no command-line program. It does not run a lease proxy
server and has no client that talks to one. It does not perform DHCP
exchanges. It does not configure network namespaces, interfaces, routes or
firewall rules. It provides the records, files, cache and error handling
that such tools work with.