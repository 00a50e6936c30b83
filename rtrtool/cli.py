"""Command line parsing for the RTR client."""

from __future__ import annotations

import enum
import os
import re
import socket
from dataclasses import dataclass, field
from typing import Iterator, Union

__all__ = [
    "CliError",
    "ClientOptions",
    "SocketConfig",
    "SocketType",
    "is_numeric",
    "is_readable_file",
    "is_resolvable_host",
    "is_utf8",
    "is_valid_port_number",
    "parse_cli",
    "usage",
]

_GLOBAL_OPTIONS = "kpahelo:t:s"
_SOCKET_OPTIONS = "kpahwrb:"

_UTF8_SEQUENCE = re.compile(
    rb"(?:[\x00-\x7f]|[\xc0-\xdf][\x80-\xbf]|[\xe0-\xef][\x80-\xbf]{2}|[\xf0-\xf7][\x80-\xbf]{3})*",
    re.DOTALL,
)


class CliError(Exception):
    """Raised when the command line is invalid.

    ``show_usage`` tells the caller to print the usage text.
    """

    def __init__(self, message: str = "", *, show_usage: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.show_usage = show_usage


class SocketType(enum.Enum):
    """Transport used to reach a cache server."""

    TCP = "tcp"
    SSH = "ssh"


@dataclass
class SocketConfig:
    """Settings for one cache server connection."""

    type: SocketType = SocketType.TCP
    host: str | None = None
    port: str | None = None
    bindaddr: str | None = None
    print_pfx_updates: bool = False
    print_spki_updates: bool = False
    print_aspa_updates: bool = False
    ssh_username: str | None = None
    ssh_private_key: str | None = None
    ssh_host_key: str | None = None
    ssh_password: str | None = None
    force_password: bool = False
    force_key: bool = False


@dataclass
class ClientOptions:
    """Everything the command line selects."""

    sockets: list[SocketConfig] = field(default_factory=list)
    print_all_pfx_updates: bool = False
    print_all_spki_updates: bool = False
    print_all_aspa_updates: bool = False
    print_status_updates: bool = False
    export_pfx: bool = False
    export_file_path: str | None = None
    template_name: str | None = None
    list_templates: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def pfx_updates_enabled(self) -> bool:
        """Whether any prefix updates are to be reported."""
        return self.print_all_pfx_updates or any(s.print_pfx_updates for s in self.sockets)

    @property
    def spki_updates_enabled(self) -> bool:
        """Whether any router key updates are to be reported."""
        return self.print_all_spki_updates or any(s.print_spki_updates for s in self.sockets)

    @property
    def aspa_updates_enabled(self) -> bool:
        """Whether any ASPA updates are to be reported."""
        return self.print_all_aspa_updates or any(s.print_aspa_updates for s in self.sockets)


def is_numeric(text: str) -> bool:
    """Return True if every character is an ASCII digit (also for the empty string)."""
    return all(char in "0123456789" for char in text)


def is_valid_port_number(text: str) -> bool:
    """Return True for a decimal port number between 1 and 65535."""
    if not is_numeric(text) or not text:
        return False
    return 1 <= int(text) <= 65535


def is_resolvable_host(host: str) -> bool:
    """Return True if the host name or address can be resolved."""
    try:
        socket.getaddrinfo(host, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError, ValueError):
        return False
    return True


def is_readable_file(path: str) -> bool:
    """Return True if path is a regular file that can be read."""
    return os.access(path, os.R_OK) and os.path.isfile(path)


def is_utf8(data: Union[str, bytes]) -> bool:
    """Return True if the bytes (or the argument's file system bytes) are UTF-8 shaped."""
    raw = os.fsencode(data) if isinstance(data, str) else bytes(data)
    raw = raw.split(b"\0", 1)[0]
    return _UTF8_SEQUENCE.fullmatch(raw) is not None


def usage(prog: str, ssh_enabled: bool = False) -> str:
    """Return the help text."""
    lines = [
        "Usage:",
        f" {prog} [-hpkels] [-o file] [-t template] <socket>...",
        "",
        "Socket:",
        " tcp [-hpkb bindaddr] <host> <port>",
    ]
    if ssh_enabled:
        lines.append(
            " ssh [-hpkb bindaddr] <host> <port> <username> (<private_key> | <password>) [<host_key>]"
        )
    lines += ["", "Options:", "-b  bindaddr Hostname or IP address to connect from", ""]
    if ssh_enabled:
        lines += [
            "-w  force ssh authentication information to be interpreted as a password",
            "-r  force ssh authentication information to be interpreted as a private key",
            "",
        ]
    lines += [
        "-k  Print information about SPKI updates.",
        "-p  Print information about PFX updates.",
        "-a  Print information about ASPA updates.",
        "-s  Print information about connection status updates.",
        "",
        "-e  export pfx table and exit",
        "-o  output file for export",
        "-t  template used for export",
        "-l  list available templates",
        "",
        "-h  Print this help message.",
        "",
        "Examples:",
        f" {prog} tcp rpki-validator.example.com 8283",
        f" {prog} tcp -k -p rpki-validator.example.com 8283",
        f" {prog} tcp -k rpki-validator.example.com 8283 tcp -s example.com 323",
        f" {prog} -kp tcp rpki-validator.example.com 8283 tcp example.com 323",
    ]
    if ssh_enabled:
        lines += [
            f" {prog} ssh rpki-validator.example.com 22 rtr-ssh ~/.ssh/id_rsa ~/.ssh/known_hosts",
            f" {prog} ssh -k -p rpki-validator.example.com 22 rtr-ssh ~/.ssh/id_rsa ~/.ssh/known_hosts",
            f" {prog} ssh -k -p rpki-validator.example.com 22 rtr-ssh ~/.ssh/id_rsa ~/.ssh/known_hosts"
            " ssh -k -p example.com 22 rtr-ssh ~/.ssh/id_rsa_example",
            f" {prog} ssh -k -p rpki-validator.example.com 22 rtr-ssh ~/.ssh/id_rsa ~/.ssh/known_hosts"
            " tcp -k -p example.com 323",
        ]
    lines += [
        f" {prog} -e tcp rpki-validator.example.com 8283",
        f" {prog} -e -t csv -o roa.csv tcp rpki-validator.example.com 8283",
    ]
    return "\n".join(lines) + "\n"


class _OptionScanner:
    """Short option scanning that stops at the first non-option word."""

    def __init__(self, argv: list[str]) -> None:
        self.argv = argv
        self.index = 0

    @property
    def remaining(self) -> int:
        return len(self.argv) - self.index

    @property
    def current(self) -> str:
        return self.argv[self.index]

    def take(self) -> str:
        word = self.argv[self.index]
        self.index += 1
        return word

    def options(self, spec: str) -> Iterator[tuple[str, str | None]]:
        takes_argument = {letter: bool(colon) for letter, colon in re.findall(r"([^:])(:?)", spec)}
        while self.index < len(self.argv):
            word = self.argv[self.index]
            if word == "--":
                self.index += 1
                return
            if len(word) < 2 or not word.startswith("-"):
                return
            self.index += 1
            cluster = word[1:]
            while cluster:
                letter, cluster = cluster[0], cluster[1:]
                if letter not in takes_argument:
                    raise CliError(f"invalid option -- '{letter}'", show_usage=True)
                if not takes_argument[letter]:
                    yield letter, None
                    continue
                if cluster:
                    value, cluster = cluster, ""
                elif self.index < len(self.argv):
                    value = self.take()
                else:
                    raise CliError(f"option requires an argument -- '{letter}'", show_usage=True)
                yield letter, value


def _names(word: str, socket_type: str) -> bool:
    return socket_type.startswith(word.lower())


def _parse_global_options(scanner: _OptionScanner, options: ClientOptions) -> None:
    for letter, value in scanner.options(_GLOBAL_OPTIONS):
        if letter == "k":
            options.print_all_spki_updates = True
        elif letter == "p":
            options.print_all_pfx_updates = True
        elif letter == "a":
            options.print_all_aspa_updates = True
        elif letter == "e":
            options.export_pfx = True
        elif letter == "o":
            if options.export_file_path:
                raise CliError("output file can not be specified more than once")
            options.export_file_path = value
        elif letter == "t":
            options.template_name = value
        elif letter == "l":
            options.list_templates = True
        elif letter == "s":
            options.print_status_updates = True
        else:
            raise CliError(show_usage=True)


def _parse_socket_options(scanner: _OptionScanner, config: SocketConfig, ssh_enabled: bool) -> None:
    for letter, value in scanner.options(_SOCKET_OPTIONS):
        if letter == "k":
            config.print_spki_updates = True
        elif letter == "p":
            config.print_pfx_updates = True
        elif letter == "a":
            config.print_aspa_updates = True
        elif letter == "b":
            config.bindaddr = value
        elif letter == "w" and ssh_enabled:
            if config.force_key:
                raise CliError("-w and -r are mutually exclusive")
            config.force_password = True
        elif letter == "r" and ssh_enabled:
            if config.force_password:
                raise CliError("-w and -r are mutually exclusive")
            config.force_key = True
        else:
            raise CliError(show_usage=True)


def _parse_host_and_port(scanner: _OptionScanner, config: SocketConfig) -> None:
    host = scanner.take()
    if not is_resolvable_host(host):
        raise CliError(f'cannot resolve "{host}"')
    config.host = host

    port = scanner.take()
    if not is_valid_port_number(port):
        raise CliError(f'"{port}" is not a valid port number')
    config.port = port


def _parse_ssh_credential(word: str, config: SocketConfig, options: ClientOptions) -> None:
    if config.force_key and not is_readable_file(word):
        raise CliError(f'"{word}" is not a readable file')
    if not config.force_password and not config.force_key and is_readable_file(word):
        config.ssh_private_key = word
    elif not config.force_password and is_utf8(word):
        options.warnings.append(
            f'"{word}" does not seem to be a file. Trying password authentication.'
        )
        options.warnings.append("Use -r to force key authentication or -w to silence this warning")
        config.ssh_password = word
    elif config.force_password and not is_utf8(word):
        raise CliError(f'"{word}" is not a valid utf8 string')
    elif config.force_password and not config.force_key and is_utf8(word):
        config.ssh_password = word
    else:
        raise CliError(f'"{word}" is neither a readable file nor a valid utf8 string')


def _parse_tcp(scanner: _OptionScanner, config: SocketConfig, ssh_enabled: bool) -> None:
    if scanner.remaining < 2:
        raise CliError("Not enough arguments for tcp socket")
    scanner.take()
    _parse_socket_options(scanner, config, ssh_enabled)
    if scanner.remaining < 2:
        raise CliError("Not enough arguments for tcp socket")
    _parse_host_and_port(scanner, config)


def _parse_ssh(scanner: _OptionScanner, config: SocketConfig, options: ClientOptions) -> None:
    if scanner.remaining < 4:
        raise CliError("Not enough arguments for ssh socket")
    scanner.take()
    _parse_socket_options(scanner, config, True)
    if scanner.remaining < 4:
        raise CliError("Not enough arguments for ssh socket")
    _parse_host_and_port(scanner, config)
    config.ssh_username = scanner.take()
    _parse_ssh_credential(scanner.take(), config, options)

    if scanner.remaining <= 0:
        return
    word = scanner.current
    if _names(word, "tcp") or _names(word, "ssh"):
        return
    if not is_readable_file(word):
        raise CliError(f'"{word}" is not a readable file')
    config.ssh_host_key = scanner.take()


def parse_cli(argv: list[str], ssh_enabled: bool = False) -> ClientOptions:
    """Parse the arguments that follow the program name.

    Raises CliError when the command line is invalid or names no socket.
    When -l is given, parsing stops after the global options.
    """
    scanner = _OptionScanner(list(argv))
    options = ClientOptions()

    _parse_global_options(scanner, options)
    if options.list_templates:
        return options

    if (options.export_file_path or options.template_name) and not options.export_pfx:
        raise CliError("Specifying -o or -t without -e does not make sense")

    while scanner.remaining > 0:
        word = scanner.current
        config = SocketConfig()
        options.sockets.append(config)
        if _names(word, "tcp"):
            config.type = SocketType.TCP
            _parse_tcp(scanner, config, ssh_enabled)
        elif _names(word, "ssh"):
            if not ssh_enabled:
                raise CliError("ssh support disabled")
            config.type = SocketType.SSH
            _parse_ssh(scanner, config, options)
        else:
            raise CliError(f'"{word}" is not a valid socket type')

    if not options.sockets:
        raise CliError(show_usage=True)
    return options