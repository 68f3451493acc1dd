"""
Pydantic model for the aria2c options edited in the interface.
JSON keys (aliases) match the field keys of the registry.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

log = logging.getLogger(__name__)

Number = int | float


def default_download_dir() -> str:
    return str(Path.home() / "Downloads")


class Aria2Config(BaseModel):
    """A validated set of aria2c options."""

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    # Input source
    uris: list[str] = Field(default_factory=list)
    input_file: str = Field("", alias="inputFile")

    # Save options
    dir: str = Field(default_factory=default_download_dir)
    out: str = ""
    continue_download: bool = Field(True, alias="continue")

    # Performance
    max_concurrent_downloads: Number | None = Field(5, alias="maxConcurrentDownloads")
    split: Number | None = 16
    max_connection_per_server: Number | None = Field(
        16, alias="maxConnectionPerServer"
    )
    file_allocation: str = Field("none", alias="fileAllocation")
    enable_mmap: bool = Field(True, alias="enableMmap")

    # Speed limits
    max_download_limit: str = Field("", alias="maxDownloadLimit")
    max_upload_limit: str = Field("", alias="maxUploadLimit")

    # BitTorrent
    follow_torrent: bool = Field(True, alias="followTorrent")
    seed_time: Number | None = Field(0, alias="seedTime")

    # Advanced
    user_agent: str = Field("", alias="userAgent")
    check_certificate: bool = Field(True, alias="checkCertificate")
    extra_args: str = Field("", alias="extraArgs")

    @field_validator("uris", mode="before")
    @classmethod
    def coerce_uris(cls, v: Any) -> Any:
        """Keeps `uris` a sequence even when a stored file holds null."""
        if v is None:
            return []
        return v

    @classmethod
    def attribute_for(cls, key: str) -> str:
        """Maps a field key (JSON alias) to the model attribute name."""
        for name, info in cls.model_fields.items():
            if key in (name, info.alias):
                return name
        raise KeyError(key)

    @classmethod
    def field_keys(cls) -> list[str]:
        """Returns every field key in declaration order."""
        return [info.alias or name for name, info in cls.model_fields.items()]

    @classmethod
    def from_partial(cls, data: dict[str, Any]) -> "Aria2Config":
        """
        Builds a config from possibly stale or hand-edited data.

        Unknown keys are ignored and keys holding values of the wrong type are
        dropped so that the defaults apply to them instead.
        """
        known = set(cls.field_keys())
        candidate = {k: v for k, v in data.items() if k in known}
        while True:
            try:
                return cls.model_validate(candidate)
            except ValidationError as e:
                bad_keys = {err["loc"][0] for err in e.errors() if err["loc"]}
                bad_keys &= set(candidate)
                if not bad_keys:
                    log.debug(f"Discarding unusable configuration data: {e}")
                    return cls()
                for key in bad_keys:
                    log.debug(f"Ignoring invalid value for '{key}': {candidate[key]!r}")
                    candidate.pop(key)

    def get_value(self, key: str) -> Any:
        return getattr(self, self.attribute_for(key))

    def set_value(self, key: str, value: Any) -> None:
        setattr(self, self.attribute_for(key), value)

    def to_json_dict(self) -> dict[str, Any]:
        """Returns a detached, alias-keyed copy suitable for JSON persistence."""
        return self.model_dump(mode="json", by_alias=True)
