import logging
from ipaddress import IPv4Address, IPv6Address
from pathlib import Path

import pytest

from varknet.aardvark import Aardvark, AardvarkEntry
from varknet.error import NetavarkError


@pytest.fixture
def config_dir(tmp_path):
    path = tmp_path / "aardvark-dns"
    path.mkdir()
    return path


@pytest.fixture
def recording_bin(tmp_path):
    """A fake server that records its arguments and RUST_LOG."""
    script = tmp_path / "fake-aardvark"
    args_file = tmp_path / "args.txt"
    log_file = tmp_path / "rustlog.txt"
    script.write_text(
        "#!/bin/sh\n"
        f'echo "$@" > "{args_file}"\n'
        f'echo "$RUST_LOG" > "{log_file}"\n'
    )
    script.chmod(0o755)
    return script, args_file, log_file


def make_entry(container_id="c1", names=("web",), network="podman"):
    return AardvarkEntry(
        network_name=network,
        container_id=container_id,
        network_gateways=[IPv4Address("10.88.0.1")],
        container_ips_v4=[IPv4Address("10.88.0.2")],
        container_ips_v6=[IPv6Address("fd00::2")],
        container_names=list(names),
    )


def test_port_is_stored_as_text(config_dir):
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    assert aardvark.port == "53"


def test_commit_entries_writes_header_and_entry(config_dir):
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    aardvark.commit_entries([make_entry()])
    content = (config_dir / "podman").read_text()
    assert content == "10.88.0.1\nc1 10.88.0.2 fd00::2 web\n"
    assert (config_dir.parent / "aardvark.lock").exists()


def test_commit_entries_includes_dns_servers(config_dir):
    entry = make_entry()
    entry.network_dns_servers = [IPv4Address("1.1.1.1"), IPv4Address("8.8.8.8")]
    entry.container_dns_servers = [IPv4Address("9.9.9.9")]
    Aardvark(str(config_dir), False, "/bin/false", 53).commit_entries([entry])
    lines = (config_dir / "podman").read_text().splitlines()
    assert lines[0] == "10.88.0.1 1.1.1.1,8.8.8.8"
    assert lines[1] == "c1 10.88.0.2 fd00::2 web 9.9.9.9"


def test_empty_dns_server_lists_add_nothing(config_dir):
    entry = make_entry()
    entry.network_dns_servers = []
    entry.container_dns_servers = []
    Aardvark(str(config_dir), False, "/bin/false", 53).commit_entries([entry])
    lines = (config_dir / "podman").read_text().splitlines()
    assert lines == ["10.88.0.1", "c1 10.88.0.2 fd00::2 web"]


def test_second_commit_appends_without_new_header(config_dir):
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    aardvark.commit_entries([make_entry("c1")])
    aardvark.commit_entries([make_entry("c2", names=("db", "db2"))])
    lines = (config_dir / "podman").read_text().splitlines()
    assert lines[0] == "10.88.0.1"
    assert lines[1].startswith("c1 ")
    assert lines[2] == "c2 10.88.0.2 fd00::2 db,db2"
    assert len(lines) == 3


def test_commit_netavark_entries_empty_does_nothing(config_dir):
    Aardvark(str(config_dir), False, "/bin/false", 53).commit_netavark_entries([])
    assert not (config_dir.parent / "aardvark.lock").exists()
    assert list(config_dir.iterdir()) == []


def test_delete_entry_keeps_other_entries(config_dir):
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    aardvark.commit_entries([make_entry("c1"), make_entry("c2")])
    aardvark.delete_entry("c1", "podman")
    lines = (config_dir / "podman").read_text().splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("c2 ")


def test_delete_last_entry_removes_file(config_dir):
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    aardvark.commit_entries([make_entry("c1")])
    aardvark.delete_entry("c1", "podman")
    assert not (config_dir / "podman").exists()


def test_delete_entry_missing_file_raises(config_dir):
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    with pytest.raises(FileNotFoundError):
        aardvark.delete_entry("c1", "missing")


def test_modify_missing_network_is_noop(config_dir):
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    assert aardvark.modify_network_dns_servers("nonet", ["1.1.1.1"]) is None
    assert not (config_dir / "nonet").exists()


def test_modify_with_no_servers_strips_header(config_dir):
    (config_dir / "podman").write_text("10.88.0.1 1.1.1.1\nc1 10.88.0.2  web\n")
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    aardvark.modify_network_dns_servers("podman", [])
    assert (config_dir / "podman").read_text() == "10.88.0.1\nc1 10.88.0.2  web\n"


def test_modify_with_servers_rewrites_then_needs_pid(config_dir):
    (config_dir / "podman").write_text("10.88.0.1\nc1 10.88.0.2  web\n")
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    with pytest.raises(NetavarkError) as info:
        aardvark.modify_network_dns_servers("podman", ["8.8.8.8", "1.1.1.1"])
    assert str(info.value).startswith("failed to get aardvark pid: IO error")
    assert (config_dir / "podman").read_text() == "10.88.0.1 8.8.8.8,1.1.1.1\nc1 10.88.0.2  web\n"


def test_notify_without_pid_and_no_start_raises(config_dir):
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    with pytest.raises(NetavarkError) as info:
        aardvark.notify(False)
    assert str(info.value).startswith("failed to get aardvark pid")


def test_notify_with_bad_pid_reports_parse_error(config_dir):
    (config_dir / "aardvark.pid").write_text("not-a-pid")
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    with pytest.raises(NetavarkError) as info:
        aardvark.notify(False)
    assert "parse aardvark pid" in str(info.value)
    assert info.value.unwrap().message.startswith("parse aardvark pid")


def test_notify_start_launches_server(config_dir, recording_bin, monkeypatch, caplog):
    script, args_file, log_file = recording_bin
    monkeypatch.setenv("PATH", "")
    caplog.set_level(logging.INFO, logger="varknet")
    aardvark = Aardvark(str(config_dir), False, str(script), 5353)
    aardvark.notify(True)
    assert args_file.read_text().split() == ["--config", str(config_dir), "-p", "5353", "run"]
    assert log_file.read_text().strip() == "INFO"


def test_commit_netavark_entries_starts_server(config_dir, recording_bin, monkeypatch):
    script, args_file, _ = recording_bin
    monkeypatch.setenv("PATH", "")
    aardvark = Aardvark(str(config_dir), False, str(script), 53)
    aardvark.commit_netavark_entries([make_entry()])
    assert (config_dir / "podman").exists()
    assert args_file.read_text().split()[-1] == "run"


def test_delete_from_netavark_entries_deletes_then_notifies(config_dir):
    aardvark = Aardvark(str(config_dir), False, "/bin/false", 53)
    aardvark.commit_entries([make_entry("c1"), make_entry("c2")])
    with pytest.raises(NetavarkError):
        aardvark.delete_from_netavark_entries([make_entry("c1")])
    lines = Path(config_dir / "podman").read_text().splitlines()
    assert all("c1" not in line for line in lines)
    assert len(lines) == 2