"""
Typed mutation of the in-memory aria2c options.
"""

import logging
from typing import Any

from pydantic import ValidationError

from aria2tui.exceptions import InvalidValueError
from aria2tui.models.config import Aria2Config
from aria2tui.models.fields import EnumField, FieldKind, URIS_KEY, get_field, is_input_ready
from aria2tui.utils.path import filename_from_uri

from .validation import parse_number

log = logging.getLogger(__name__)

TRUE_WORDS = frozenset({"true", "1", "yes", "on"})


class ConfigStore:
    """
    Owns the current `Aria2Config` and applies edits to it according to the kind
    of the field being edited.
    """

    def __init__(self, config: Aria2Config | None = None):
        self.config = config if config is not None else Aria2Config()

    def get(self, key: str) -> Any:
        return self.config.get_value(key)

    def set(self, key: str, value: Any) -> None:
        self.config.set_value(key, value)

    def toggle(self, key: str) -> bool:
        """Flips a boolean field and returns the new value."""
        field = get_field(key)
        if field is None or field.kind != FieldKind.BOOL:
            raise InvalidValueError(f"'{key}' is not a boolean option")
        value = not self.get(key)
        self.set(key, value)
        return value

    def cycle_enum(self, key: str) -> str:
        """
        Moves an enum field to the option after its current value, wrapping
        around. A value that is not one of the options moves to the first one.
        """
        field = get_field(key)
        if not isinstance(field, EnumField):
            raise InvalidValueError(f"'{key}' is not a choice option")
        options = field.options
        current = str(self.get(key) or "")
        index = options.index(current) if current in options else -1
        value = options[(index + 1) % len(options)]
        self.set(key, value)
        return value

    def commit(self, key: str, raw: str) -> Any:
        """
        Stores text typed into an editor, converted to the field's kind, and
        returns the stored value.

        Raises:
            InvalidValueError: If a number cannot be parsed; nothing is changed.
        """
        field = get_field(key)
        if field is None or field.kind == FieldKind.ACTION:
            raise InvalidValueError(f"'{key}' cannot be edited")

        if field.kind == FieldKind.NUMBER:
            if not raw.strip():
                value = None
            else:
                try:
                    value = parse_number(raw)
                except ValueError as e:
                    raise InvalidValueError("Invalid number") from e
        elif field.kind == FieldKind.BOOL:
            value = raw.lower() in TRUE_WORDS
        elif field.kind == FieldKind.LIST:
            value = raw.split()
        else:
            value = raw

        try:
            self.set(key, value)
        except ValidationError as e:
            raise InvalidValueError(f"Invalid value for '{key}'") from e
        return value

    def snapshot(self) -> dict[str, Any]:
        """Returns a detached copy of every value, keyed by field key."""
        return self.config.to_json_dict()

    def apply(self, values: dict[str, Any]) -> None:
        """
        Overlays stored values (e.g. from a history entry) onto the current
        options. Keys that are unknown or hold unusable values are skipped.
        """
        known = set(Aria2Config.field_keys())
        for key, value in values.items():
            if key not in known:
                continue
            try:
                self.set(key, value)
            except ValidationError:
                log.debug(f"Skipping unusable stored value for '{key}': {value!r}")

    def is_ready(self) -> bool:
        return is_input_ready(self.config)

    def derive_output_name(self) -> str | None:
        """
        Fills in the output file name from the first URI when it is blank.
        Returns the derived name, or None if nothing was derived.
        """
        if self.config.out.strip() or not self.config.uris:
            return None
        name = filename_from_uri(self.get(URIS_KEY)[0])
        if name:
            self.config.out = name
            log.debug(f"Derived output file name '{name}'.")
        return name
