"""Pydantic models shared across frccli.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ApiConfig`, :class:`OutputConfig`, :class:`CacheConfig`,
    :class:`ServerConfig` and :class:`GlobalConfig`.

**Query models** -- typed parameters for the FRC Events API:
    :class:`TournamentLevel`, :class:`TournamentType` and
    :class:`EventQuery`.

API *responses* are deliberately not modelled. They are handled as plain
decoded JSON and traversed generically by :mod:`frccli.query`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BASE_URL = "https://frc-api.firstinspires.org/v3.0"


# --- Config ---


class ApiConfig(BaseModel):
    """Connection settings for the FRC Events API."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="API root URL")
    token_source: str = Field(
        default="env:FRC_API_TOKEN",
        description="Credential source: env:VAR, file:/path, prompt",
    )
    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=3, description="Max retry attempts")


class OutputConfig(BaseModel):
    """Default output format preferences."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich, html"
    )


class CacheConfig(BaseModel):
    """HTTP response cache settings."""

    enabled: bool = Field(default=True, description="Enable response caching")
    ttl_seconds: int = Field(default=300, description="Cache TTL in seconds")


class ServerConfig(BaseModel):
    """Defaults for ``frccli serve``."""

    host: str = "127.0.0.1"
    port: int = 3000


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/frccli/config.json``.

    Loaded and saved by :func:`~frccli.config.load_global_config` and
    :func:`~frccli.config.save_global_config`. See
    :func:`~frccli.config.resolve_config` for how project config,
    environment variables and CLI flags are layered on top.
    """

    model_config = ConfigDict(extra="allow")

    team: Optional[int] = Field(default=None, description="Your team number")
    district: Optional[str] = Field(default=None, description="Your district code")
    api: ApiConfig = Field(default_factory=ApiConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


# --- Query models ---


class TournamentLevel(str, enum.Enum):
    """Match levels accepted by the schedule, scores and matches endpoints."""

    NONE = "None"
    PRACTICE = "Practice"
    QUALIFICATION = "Qualification"
    PLAYOFF = "Playoff"

    @classmethod
    def parse(cls, value: str) -> "TournamentLevel":
        """Case-insensitive lookup by value (``"playoff"`` -> ``PLAYOFF``)."""
        for level in cls:
            if level.value.lower() == value.strip().lower():
                return level
        raise ValueError(f"Unknown tournament level: {value}")


ALL_LEVELS = "All"
"""Selector meaning Practice, Qualification and Playoff, concatenated in that order."""

PLAYED_LEVELS = (
    TournamentLevel.PRACTICE,
    TournamentLevel.QUALIFICATION,
    TournamentLevel.PLAYOFF,
)


class TournamentType(str, enum.Enum):
    """Event types reported by the events endpoint."""

    NONE = "None"
    REGIONAL = "Regional"
    DISTRICT_EVENT = "DistrictEvent"
    DISTRICT_CHAMPIONSHIP = "DistrictChampionship"
    DISTRICT_CHAMPIONSHIP_WITH_LEVELS = "DistrictChampionshipWithLevels"
    DISTRICT_CHAMPIONSHIP_DIVISION = "DistrictChampionshipDivision"
    CHAMPIONSHIP_SUBDIVISION = "ChampionshipSubdivision"
    CHAMPIONSHIP_DIVISION = "ChampionshipDivision"
    CHAMPIONSHIP = "Championship"
    OFFSEASON = "Offseason"
    OFFSEASON_WITH_AZURE_SYNC = "OffseasonWithAzureSync"


class EventQuery(BaseModel):
    """Filters for the ``events`` endpoint.

    Field names follow the API's query parameter names so that
    :meth:`to_params` is a plain dump.
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    event_code: Optional[str] = Field(default=None, alias="eventCode")
    team_number: Optional[int] = Field(default=None, alias="teamNumber")
    district_code: Optional[str] = Field(default=None, alias="districtCode")
    exclude_district: Optional[bool] = Field(default=None, alias="excludeDistrict")
    week_number: Optional[int] = Field(default=None, alias="weekNumber")
    tournament_type: Optional[TournamentType] = Field(default=None, alias="tournamentType")

    def to_params(self) -> dict[str, Any]:
        """Query parameters with unset filters omitted."""
        params = self.model_dump(by_alias=True, exclude_none=True)
        if "excludeDistrict" in params:
            params["excludeDistrict"] = str(params["excludeDistrict"]).lower()
        return params
