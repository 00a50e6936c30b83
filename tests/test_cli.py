import os
import socket
from unittest import mock

import pytest

from rtrtool.cli import (
    CliError,
    SocketType,
    is_numeric,
    is_readable_file,
    is_resolvable_host,
    is_utf8,
    is_valid_port_number,
    parse_cli,
    usage,
)

HOST = "127.0.0.1"


@pytest.fixture
def key_file(tmp_path):
    path = tmp_path / "id_key"
    path.write_text("key material")
    return str(path)


def test_is_numeric():
    assert is_numeric("8283") is True
    assert is_numeric("82a3") is False
    assert is_numeric("") is True


@pytest.mark.parametrize(
    "text, expected",
    [("8283", True), ("1", True), ("65535", True), ("0", False), ("65536", False), ("-1", False), ("", False)],
)
def test_is_valid_port_number(text, expected):
    assert is_valid_port_number(text) is expected


def test_is_resolvable_host_numeric_address():
    assert is_resolvable_host(HOST) is True


def test_is_resolvable_host_failure():
    with mock.patch("socket.getaddrinfo", side_effect=socket.gaierror("no")):
        assert is_resolvable_host("unknown.invalid") is False


def test_is_readable_file(tmp_path, key_file):
    assert is_readable_file(key_file) is True
    assert is_readable_file(str(tmp_path)) is False
    assert is_readable_file(str(tmp_path / "missing")) is False


def test_is_utf8():
    assert is_utf8("abc") is True
    assert is_utf8("é€𝄞".encode()) is True
    assert is_utf8(b"\xff") is False
    assert is_utf8(b"\xc3") is False
    assert is_utf8(os.fsdecode(b"\xe2\x82")) is False


def test_usage_mentions_ssh_only_when_enabled():
    plain = usage("rtrclient", False)
    with_ssh = usage("rtrclient", True)
    assert plain.startswith("Usage:\n rtrclient ")
    assert " ssh [" not in plain
    assert " ssh [" in with_ssh
    assert "-w  " in with_ssh and "-w  " not in plain


def test_single_tcp_socket():
    options = parse_cli(["tcp", HOST, "8283"])
    assert len(options.sockets) == 1
    config = options.sockets[0]
    assert config.type is SocketType.TCP
    assert (config.host, config.port) == (HOST, "8283")
    assert options.pfx_updates_enabled is False


def test_global_flags_cluster():
    options = parse_cli(["-kps", "tcp", HOST, "8283"])
    assert options.print_all_spki_updates and options.print_all_pfx_updates
    assert options.print_status_updates
    assert options.spki_updates_enabled and options.pfx_updates_enabled
    assert options.aspa_updates_enabled is False


def test_socket_flags_and_bindaddr():
    options = parse_cli(["tcp", "-k", "-b", HOST, HOST, "323", "tcp", "-a", HOST, "8283"])
    first, second = options.sockets
    assert first.print_spki_updates and first.bindaddr == HOST
    assert second.print_aspa_updates and not second.print_spki_updates
    assert options.print_all_spki_updates is False
    assert options.spki_updates_enabled and options.aspa_updates_enabled


def test_socket_type_prefix_is_case_insensitive():
    options = parse_cli(["TC", HOST, "323"])
    assert options.sockets[0].type is SocketType.TCP


def test_list_templates_stops_parsing():
    options = parse_cli(["-l"])
    assert options.list_templates is True
    assert options.sockets == []


def test_export_options():
    options = parse_cli(["-e", "-t", "csv", "-oroa.csv", "tcp", HOST, "8283"])
    assert options.export_pfx is True
    assert options.template_name == "csv"
    assert options.export_file_path == "roa.csv"


def test_output_without_export_is_rejected():
    with pytest.raises(CliError) as info:
        parse_cli(["-o", "roa.csv", "tcp", HOST, "8283"])
    assert info.value.message == "Specifying -o or -t without -e does not make sense"


def test_output_twice_is_rejected():
    with pytest.raises(CliError, match="more than once"):
        parse_cli(["-e", "-o", "a", "-o", "b", "tcp", HOST, "8283"])


@pytest.mark.parametrize("argv", [["-x", "tcp", HOST, "1"], ["-h"], [], ["-o"], ["tcp", "-w", HOST, "1"]])
def test_usage_errors(argv):
    with pytest.raises(CliError) as info:
        parse_cli(argv)
    assert info.value.show_usage is True


def test_invalid_socket_type():
    with pytest.raises(CliError, match="is not a valid socket type"):
        parse_cli(["udp", HOST, "323"])


def test_not_enough_tcp_arguments():
    with pytest.raises(CliError, match="Not enough arguments for tcp socket"):
        parse_cli(["tcp", HOST])


def test_not_enough_tcp_arguments_after_options():
    with pytest.raises(CliError, match="Not enough arguments for tcp socket"):
        parse_cli(["tcp", "-k", HOST])


def test_invalid_port():
    with pytest.raises(CliError, match="is not a valid port number"):
        parse_cli(["tcp", HOST, "99999"])


def test_unresolvable_host():
    with mock.patch("socket.getaddrinfo", side_effect=socket.gaierror("no")):
        with pytest.raises(CliError, match="cannot resolve"):
            parse_cli(["tcp", "unknown.invalid", "323"])


def test_ssh_disabled():
    with pytest.raises(CliError, match="ssh support disabled"):
        parse_cli(["ssh", HOST, "22", "rtr-ssh", "password"])


def test_ssh_with_private_key(key_file):
    options = parse_cli(["ssh", HOST, "22", "rtr-ssh", key_file, key_file], ssh_enabled=True)
    config = options.sockets[0]
    assert config.type is SocketType.SSH
    assert config.ssh_username == "rtr-ssh"
    assert config.ssh_private_key == key_file
    assert config.ssh_host_key == key_file
    assert config.ssh_password is None
    assert options.warnings == []


def test_ssh_password_with_warning():
    options = parse_cli(["ssh", HOST, "22", "rtr-ssh", "password"], ssh_enabled=True)
    assert options.sockets[0].ssh_password == "password"
    assert len(options.warnings) == 2


def test_ssh_forced_password_is_silent():
    options = parse_cli(["ssh", "-w", HOST, "22", "rtr-ssh", "password"], ssh_enabled=True)
    assert options.sockets[0].ssh_password == "password"
    assert options.warnings == []


def test_ssh_forced_key_must_be_readable(tmp_path):
    missing = str(tmp_path / "missing")
    with pytest.raises(CliError, match="is not a readable file"):
        parse_cli(["ssh", "-r", HOST, "22", "rtr-ssh", missing], ssh_enabled=True)


def test_ssh_flags_are_exclusive():
    with pytest.raises(CliError, match="mutually exclusive"):
        parse_cli(["ssh", "-w", "-r", HOST, "22", "rtr-ssh", "password"], ssh_enabled=True)


def test_ssh_followed_by_tcp_socket():
    options = parse_cli(
        ["ssh", HOST, "22", "rtr-ssh", "password", "tcp", HOST, "323"], ssh_enabled=True
    )
    ssh_config, tcp_config = options.sockets
    assert ssh_config.ssh_host_key is None
    assert tcp_config.type is SocketType.TCP
    assert tcp_config.port == "323"


def test_ssh_host_key_must_be_readable(tmp_path):
    missing = str(tmp_path / "hosts")
    with pytest.raises(CliError, match="is not a readable file"):
        parse_cli(["ssh", HOST, "22", "rtr-ssh", "password", missing], ssh_enabled=True)


def test_not_enough_ssh_arguments():
    with pytest.raises(CliError, match="Not enough arguments for ssh socket"):
        parse_cli(["ssh", HOST, "22", "rtr-ssh"], ssh_enabled=True)