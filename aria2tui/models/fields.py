"""
Declarative schema of every configurable aria2c option and the topical groups
they are shown in.

Each field kind is its own dataclass so that a field only carries the attributes
that make sense for it (only `EnumField` has options, only `StringField` has a
format).
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Union

if TYPE_CHECKING:
    from aria2tui.models.config import Aria2Config


class FieldKind(str, Enum):
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    LIST = "list"
    ENUM = "enum"
    FILE = "file"
    ACTION = "action"


class StringFormat(str, Enum):
    """How the text of a string field is checked while it is being edited."""

    TEXT = "text"
    PATH = "path"
    RATE = "rate"


@dataclass(frozen=True, kw_only=True)
class _BaseField:
    key: str
    label: str
    group: str
    description: str = ""
    hint: str = ""

    kind: ClassVar[FieldKind]


@dataclass(frozen=True, kw_only=True)
class BoolField(_BaseField):
    kind: ClassVar[FieldKind] = FieldKind.BOOL


@dataclass(frozen=True, kw_only=True)
class NumberField(_BaseField):
    kind: ClassVar[FieldKind] = FieldKind.NUMBER


@dataclass(frozen=True, kw_only=True)
class StringField(_BaseField):
    format: StringFormat = StringFormat.TEXT

    kind: ClassVar[FieldKind] = FieldKind.STRING


@dataclass(frozen=True, kw_only=True)
class ListField(_BaseField):
    kind: ClassVar[FieldKind] = FieldKind.LIST


@dataclass(frozen=True, kw_only=True)
class EnumField(_BaseField):
    options: tuple[str, ...]

    kind: ClassVar[FieldKind] = FieldKind.ENUM


@dataclass(frozen=True, kw_only=True)
class FileField(_BaseField):
    kind: ClassVar[FieldKind] = FieldKind.FILE


@dataclass(frozen=True, kw_only=True)
class ActionField(_BaseField):
    kind: ClassVar[FieldKind] = FieldKind.ACTION


Field = Union[
    BoolField, NumberField, StringField, ListField, EnumField, FileField, ActionField
]


@dataclass(frozen=True)
class Group:
    key: str
    name: str
    icon: str
    description: str
    required: bool = False


INPUT_GROUP = "input"
URIS_KEY = "uris"
INPUT_FILE_KEY = "inputFile"
RUN_KEY = "__run__"

GROUPS: tuple[Group, ...] = (
    Group(
        INPUT_GROUP,
        "Input source",
        "🔗",
        "Set download URIs, a torrent/metalink file or an input file",
        required=True,
    ),
    Group("save", "Save options", "💾", "Save directory, file name and resuming"),
    Group(
        "performance",
        "Performance",
        "⚡",
        "Concurrency, splitting, connections and file allocation",
    ),
    Group("limit", "Speed limits", "🚦", "Limit download and upload speed"),
    Group("torrent", "BitTorrent", "🌱", "Options for BitTorrent downloads"),
    Group(
        "advanced",
        "Advanced",
        "⚙️",
        "User-Agent, certificate checks and extra arguments",
    ),
    Group("action", "Run download", "▶️", "Preview and run the aria2c command"),
)

FIELDS: tuple[Field, ...] = (
    # Input source
    ListField(
        key=URIS_KEY,
        label="Download URIs (u)",
        group=INPUT_GROUP,
        description="Download URLs; separate several links with spaces",
        hint="space separated",
    ),
    FileField(
        key=INPUT_FILE_KEY,
        label="Choose file (t)",
        group=INPUT_GROUP,
        description="Pick a .torrent, .metalink or aria2 input file",
        hint="file path",
    ),
    # Save options
    StringField(
        key="dir",
        label="Save directory (-d)",
        group="save",
        description="Directory the download is stored in; blank uses the current one",
        hint="absolute or relative path",
        format=StringFormat.PATH,
    ),
    StringField(
        key="out",
        label="Output file name (-o)",
        group="save",
        description="Name of the downloaded file (single-file downloads only)",
        hint="file name",
    ),
    BoolField(
        key="continue",
        label="Resume (-c)",
        group="save",
        description="Continue a partially downloaded file",
    ),
    # Performance
    NumberField(
        key="maxConcurrentDownloads",
        label="Concurrent downloads (-j)",
        group="performance",
        description="Number of downloads running at the same time",
        hint="1-10 recommended",
    ),
    NumberField(
        key="split",
        label="Split (-s)",
        group="performance",
        description="Number of pieces a single file is downloaded in",
        hint="16-64 recommended",
    ),
    NumberField(
        key="maxConnectionPerServer",
        label="Connections per server (-x)",
        group="performance",
        description="Maximum number of connections to one server",
        hint="1-16 recommended",
    ),
    EnumField(
        key="fileAllocation",
        label="File allocation",
        group="performance",
        description="How disk space is reserved before downloading",
        options=("none", "prealloc", "trunc", "falloc"),
    ),
    BoolField(
        key="enableMmap",
        label="Enable mmap",
        group="performance",
        description="Map files into memory; may improve throughput",
    ),
    # Speed limits
    StringField(
        key="maxDownloadLimit",
        label="Download limit",
        group="limit",
        description="Maximum download speed (blank for unlimited)",
        hint="e.g. 10M, 1G",
        format=StringFormat.RATE,
    ),
    StringField(
        key="maxUploadLimit",
        label="Upload limit",
        group="limit",
        description="Maximum upload speed (BitTorrent)",
        hint="e.g. 1M, 500K",
        format=StringFormat.RATE,
    ),
    # BitTorrent
    BoolField(
        key="followTorrent",
        label="Follow torrent",
        group="torrent",
        description="Start downloading the contents of a downloaded .torrent file",
    ),
    NumberField(
        key="seedTime",
        label="Seed time (minutes)",
        group="torrent",
        description="Minutes to keep seeding after completion; 0 disables seeding",
        hint="minutes",
    ),
    # Advanced
    StringField(
        key="userAgent",
        label="User-Agent (-U)",
        group="advanced",
        description="Custom HTTP User-Agent string",
    ),
    BoolField(
        key="checkCertificate",
        label="Check certificate",
        group="advanced",
        description="Verify the server certificate on HTTPS connections",
    ),
    StringField(
        key="extraArgs",
        label="Extra arguments",
        group="advanced",
        description="Other aria2c arguments, appended as typed",
        hint="appended as typed",
    ),
    # Run
    ActionField(
        key=RUN_KEY,
        label="Run aria2c (r/Enter)",
        group="action",
        description="Run the aria2c command and start downloading",
    ),
)

_FIELDS_BY_KEY = {f.key: f for f in FIELDS}
_GROUPS_BY_KEY = {g.key: g for g in GROUPS}


def get_field(key: str) -> Field | None:
    """Looks up a field by its key."""
    return _FIELDS_BY_KEY.get(key)


def get_group(key: str) -> Group | None:
    return _GROUPS_BY_KEY.get(key)


def fields_in_group(group_key: str) -> list[Field]:
    """Returns the fields of a group in declaration order."""
    return [f for f in FIELDS if f.group == group_key]


def is_input_ready(config: "Aria2Config") -> bool:
    """
    A download needs something to fetch: at least one URI or a non-blank input
    file path.
    """
    return bool(config.uris) or bool(config.input_file.strip())


def group_summary(config: "Aria2Config", group_key: str) -> str:
    """
    Formats how many options of a group hold a value, e.g. '2/3'.

    Booleans always count as set; action items are not counted at all.
    """
    configurable = [f for f in fields_in_group(group_key) if f.kind != FieldKind.ACTION]
    set_count = 0
    for f in configurable:
        value = config.get_value(f.key)
        if f.kind == FieldKind.BOOL:
            set_count += 1
        elif f.kind == FieldKind.LIST:
            set_count += bool(value)
        elif value is not None and value != "":
            set_count += 1
    return f"{set_count}/{len(configurable)}"
