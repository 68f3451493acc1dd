"""
Translation of the options into the argument vector passed to aria2c.
"""

from typing import Any

from aria2tui.models.config import Aria2Config
from aria2tui.utils.shell import split_shell_words

# aria2c options whose value follows as a separate argument. Used to tell option
# values apart from URIs when checking that a command has something to download.
VALUE_OPTIONS = frozenset(
    {
        "-d",
        "--dir",
        "-o",
        "--out",
        "-j",
        "--max-concurrent-downloads",
        "-s",
        "--split",
        "-x",
        "--max-connection-per-server",
        "-k",
        "--min-split-size",
        "-U",
        "--user-agent",
        "-i",
        "--input-file",
        "-T",
        "--torrent-file",
        "-M",
        "--metalink-file",
        "-l",
        "--log",
        "-t",
        "--timeout",
        "-m",
        "--max-tries",
        "--header",
        "--referer",
        "--all-proxy",
        "--http-proxy",
        "--https-proxy",
        "--http-user",
        "--http-passwd",
        "--load-cookies",
        "--save-session",
    }
)


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


def build_arguments(config: Aria2Config) -> list[str]:
    """
    Builds the aria2c argument vector in a fixed order. Blank or unset options
    are left out.
    """
    args: list[str] = []

    def add_pair(flag: str, value: Any) -> None:
        if not _is_blank(value):
            args.extend([flag, str(value)])

    def add_joined(flag: str, value: Any) -> None:
        if not _is_blank(value):
            args.append(f"{flag}={value}")

    add_pair("-d", config.dir)
    add_pair("-o", config.out)
    if config.continue_download:
        args.append("-c")
    add_pair("-j", config.max_concurrent_downloads)
    add_pair("-s", config.split)
    add_pair("-x", config.max_connection_per_server)
    add_joined("--max-download-limit", config.max_download_limit)
    add_joined("--max-upload-limit", config.max_upload_limit)
    add_joined("--file-allocation", config.file_allocation)
    add_joined("--check-certificate", _bool_text(config.check_certificate))
    add_joined("--enable-mmap", _bool_text(config.enable_mmap))
    add_joined("--follow-torrent", _bool_text(config.follow_torrent))
    add_joined("--seed-time", config.seed_time)
    add_pair("-U", config.user_agent)

    if config.input_file:
        args.extend(["--input-file", config.input_file])

    args.extend(split_shell_words(config.extra_args))
    args.extend(uri for uri in config.uris if uri)
    return args


def has_positional(args: list[str]) -> bool:
    """
    Checks for at least one argument that is neither an option nor the value of
    an option, i.e. something for aria2c to download.
    """
    expects_value = False
    for arg in args:
        if expects_value:
            expects_value = False
            continue
        if arg.startswith("-") and arg != "-":
            expects_value = "=" not in arg and arg in VALUE_OPTIONS
            continue
        if arg:
            return True
    return False


def can_launch(args: list[str], config: Aria2Config) -> bool:
    """A command can run if it names a URI or an input file."""
    return has_positional(args) or bool(config.input_file)
