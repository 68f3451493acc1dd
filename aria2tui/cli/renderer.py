"""
Builds the Rich renderable for the current application state.

Rendering is a pure function of `AppState`; the event loop redraws the whole
screen after every event.
"""

import shlex
from typing import Any

from rich import box
from rich.console import Group as RenderGroup
from rich.console import RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from aria2tui.core.arguments import build_arguments
from aria2tui.core.state import AppState, MessageLevel, Mode, View
from aria2tui.models.fields import (
    GROUPS,
    INPUT_GROUP,
    URIS_KEY,
    FieldKind,
    fields_in_group,
    get_group,
    group_summary,
)
from aria2tui.models.history import RunStatus
from aria2tui.storage.history import primary_source
from aria2tui.utils.formatting import format_timestamp, format_value, tail, truncate
from aria2tui.utils.path import SUPPORTED_EXTENSIONS

TITLE = "aria2 download configurator"
HISTORY_ROWS = 15
FILENAME_WIDTH = 40

STATUS_ICONS = {
    RunStatus.COMPLETED: ("✓", "green"),
    RunStatus.FAILED: ("✗", "red"),
    RunStatus.PENDING: ("⋯", "yellow"),
}

KIND_ICONS = {
    FieldKind.ACTION: "▶",
    FieldKind.LIST: "≡",
    FieldKind.NUMBER: "#",
    FieldKind.ENUM: "⚙",
    FieldKind.FILE: "📁",
    FieldKind.STRING: "▸",
}

MESSAGE_STYLES = {
    MessageLevel.INFO: "cyan",
    MessageLevel.SUCCESS: "green",
    MessageLevel.WARNING: "yellow",
    MessageLevel.ERROR: "bold red",
}


def _header(subtitle: str, keys: str) -> Text:
    text = Text()
    text.append(TITLE, style="bold cyan")
    text.append(f"  {subtitle}\n", style="bold")
    text.append(keys, style="dim")
    return text


def _row(selected: bool, *parts: tuple[str, str]) -> Text:
    text = Text("❯ " if selected else "  ", style="bold cyan")
    for content, style in parts:
        text.append(content, style=style)
    if selected:
        text.stylize("reverse", 2)
    return text


def render_history(app: AppState, width: int) -> RenderableType:
    nav = app.nav
    lines: list[RenderableType] = [
        _header("History", "↑↓ select · Enter restore · n new · d delete · q quit"),
        Text(),
    ]

    if len(app.history) == 0:
        lines.append(_row(True, ("＋ New download", "bold")))
        lines.append(Text("  No downloads yet, press n to start a new download", style="dim"))
        lines.append(Text())
        lines.append(Text("Enter or n: configure a new download", style="dim"))
        return RenderGroup(*lines)

    lines.append(_row(nav.selected == 0, ("＋ New download", "bold")))
    # Scroll so the selected entry stays inside the visible window.
    first = max(0, nav.selected - HISTORY_ROWS)
    window = app.history.entries[first : first + HISTORY_ROWS]
    for index, entry in enumerate(window, start=first + 1):
        icon, style = STATUS_ICONS[entry.status]
        selected = nav.selected == index
        lines.append(
            _row(
                selected,
                (f"{icon} ", style),
                (truncate(entry.filename, FILENAME_WIDTH).ljust(FILENAME_WIDTH), ""),
                (f"  {format_timestamp(entry.timestamp)}", "dim"),
            )
        )
        if selected:
            source = entry.source or primary_source(entry.config)
            lines.append(Text(f"    {tail(source, max(10, width - 6))}", style="dim"))

    lines.append(Text())
    lines.append(Text(_history_footer(app), style="dim"))
    return RenderGroup(*lines)


def _history_footer(app: AppState) -> str:
    selected = app.nav.selected
    entry = app.history.get(selected - 1) if selected > 0 else None
    if entry is None:
        return "Enter: configure a new download"
    if entry.status == RunStatus.COMPLETED:
        return "Enter: already downloaded, you will be asked before downloading again"
    if entry.status == RunStatus.FAILED:
        return "Enter: restore the options and retry the download"
    return "Enter: restore the options and resume the download"


def render_groups(app: AppState) -> RenderableType:
    nav = app.nav
    ready = nav.input_ready
    lines: list[RenderableType] = [
        _header(
            "Options",
            "↑↓ select · Enter open · u URIs · t file · p preview · r run · "
            "s save · Esc history · q quit",
        ),
        Text(),
    ]
    for index, group in enumerate(GROUPS):
        if group.key == INPUT_GROUP:
            status = ("✓ ", "green") if ready else ("! ", "yellow")
        elif group.key == "action":
            status = ("▶ ", "green")
        elif not ready:
            status = ("🔒", "dim")
        else:
            status = ("▸ ", "cyan")
        locked = not ready and group.key not in (INPUT_GROUP, "action")
        parts = [
            status,
            (f" {group.icon} ", ""),
            (group.name, "dim" if locked else "bold"),
        ]
        if group.key != "action":
            parts.append((f"  [{group_summary(app.store.config, group.key)}]", "dim"))
        if locked:
            parts.append(("  set an input source first", "dim italic"))
        lines.append(_row(nav.selected == index, *parts))

    lines.append(Text())
    if 0 <= nav.selected < len(GROUPS):
        group = GROUPS[nav.selected]
        if not ready and group.key not in (INPUT_GROUP, "action"):
            lines.append(
                Text("Set the download URIs or pick a file to unlock", style="yellow")
            )
        else:
            lines.append(Text(group.description, style="dim"))
    return RenderGroup(*lines)


def _field_icon(kind: FieldKind, value: Any) -> tuple[str, str]:
    if kind == FieldKind.BOOL:
        return ("✓", "green") if value else ("✗", "red")
    return KIND_ICONS.get(kind, "▸"), "cyan"


def _inline_box(buffer: str, width: int) -> Panel:
    inner = max(10, width - 10)
    text = Text(tail(buffer, inner - 1))
    text.append("█", style="blink")
    return Panel(text, box=box.ROUNDED, border_style="cyan", width=inner + 4)


def render_fields(app: AppState, width: int) -> RenderableType:
    nav = app.nav
    group = get_group(nav.current_group or "")
    title = f"{group.icon} {group.name}" if group else "Options"
    lines: list[RenderableType] = [
        _header(title, "↑↓ select · Enter edit · space toggle · Esc back · q quit"),
        Text(),
    ]
    group_fields = fields_in_group(nav.current_group or "")
    for index, field in enumerate(group_fields):
        selected = nav.selected == index
        value = app.store.get(field.key) if field.kind != FieldKind.ACTION else None
        icon, style = _field_icon(field.kind, value)
        parts = [(f"{icon} ", style), (field.label, "bold")]
        if field.kind != FieldKind.ACTION:
            shown = format_value(value)
            parts.append((f": {shown}" if shown else ": (empty)", "" if shown else "dim"))
        lines.append(_row(selected, *parts))

        if selected and field.key == URIS_KEY:
            if nav.mode == Mode.INLINE_EDIT and nav.inline_edit is not None:
                lines.append(_inline_box(nav.inline_edit.buffer, width))
            else:
                for uri in app.store.config.uris:
                    lines.append(Text(f"    • {tail(uri, max(10, width - 8))}", style="dim"))

    lines.append(Text())
    if nav.mode == Mode.INLINE_EDIT:
        lines.append(
            Text("Type or paste URIs separated by spaces · Enter save · Esc cancel", style="dim")
        )
    elif 0 <= nav.selected < len(group_fields):
        lines.append(Text(group_fields[nav.selected].description, style="dim"))
    return RenderGroup(*lines)


def render_prompt(app: AppState, width: int) -> RenderableType:
    prompt = app.nav.prompt
    text = Text(prompt.buffer)
    text.append("█", style="blink")
    content = Table.grid(padding=(0, 0))
    content.add_row(Text(prompt.label, style="bold"))
    if prompt.hint:
        content.add_row(Text(prompt.hint, style="dim"))
    content.add_row(Panel(text, box=box.ROUNDED, border_style="cyan"))

    result = prompt.validation
    if result.message:
        if not result.valid:
            content.add_row(Text(f"✗ {result.message}", style="red"))
        elif result.warning:
            content.add_row(Text(f"⚠ {result.message}", style="yellow"))
        else:
            content.add_row(Text(f"✓ {result.message}", style="green"))
    content.add_row(Text("Enter save · Esc cancel", style="dim"))
    return Panel(content, title="Edit", border_style="cyan", width=min(width, 80))


def render_file_browser(app: AppState, height: int) -> RenderableType:
    browser = app.nav.file_browser
    lines: list[RenderableType] = [
        _header(f"📁 {browser.directory}", "↑↓ select · Enter choose · Esc/q cancel"),
        Text(),
    ]
    if not browser.entries:
        lines.append(
            Text(
                "No supported files here (" + ", ".join(SUPPORTED_EXTENSIONS) + ")",
                style="yellow",
            )
        )
        return RenderGroup(*lines)

    visible = max(3, height - 6)
    start = max(0, browser.cursor - visible // 2)
    start = min(start, max(0, len(browser.entries) - visible))
    for index in range(start, min(len(browser.entries), start + visible)):
        entry = browser.entries[index]
        lines.append(_row(index == browser.cursor, (entry.name, "")))
    return RenderGroup(*lines)


def render_preview(app: AppState, width: int) -> RenderableType:
    args = build_arguments(app.store.config)
    command = Text(shlex.quote(app.settings.bin), style="bold green")
    for arg in args:
        command.append(" ")
        command.append(shlex.quote(arg), style="cyan" if arg.startswith("-") else "")
    return RenderGroup(
        _header("Command preview", "Enter/r run · Esc back · q quit"),
        Text(),
        Panel(command, box=box.ROUNDED, border_style="green", width=width),
    )


def render_confirm() -> RenderableType:
    text = Text("This file has already been downloaded. Download it again?\n\n")
    text.append("[y]", style="bold green")
    text.append(" yes   ")
    text.append("[n]", style="bold red")
    text.append(" no")
    return Panel(text, title="Confirm", border_style="yellow", expand=False)


def render_message(app: AppState) -> RenderableType | None:
    message = app.nav.message
    if message is None or not message.is_visible():
        return None
    return Text(message.text, style=MESSAGE_STYLES[message.level])


def render(app: AppState, width: int = 80, height: int = 24) -> RenderableType:
    """Returns the full screen for the current mode and view."""
    nav = app.nav
    if nav.mode == Mode.PROMPT and nav.prompt is not None:
        body = render_prompt(app, width)
    elif nav.mode == Mode.FILE_BROWSER and nav.file_browser is not None:
        body = render_file_browser(app, height)
    elif nav.mode == Mode.PREVIEW:
        body = render_preview(app, width)
    elif nav.mode == Mode.CONFIRM:
        body = render_confirm()
    elif nav.view == View.HISTORY:
        body = render_history(app, width)
    elif nav.view == View.GROUPS:
        body = render_groups(app)
    else:
        body = render_fields(app, width)

    message = render_message(app) if nav.mode == Mode.LIST else None
    if message is None:
        return body
    return RenderGroup(body, Text(), message)
