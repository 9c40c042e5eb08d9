# factionmap/errors.py
from __future__ import annotations

from typing import Optional

USAGE_HINT = "Usage: `/factionmap factions: Primary Faction, Rival Faction` (names are case-sensitive)."


class FactionMapError(Exception):
    """Base for every terminal failure of a faction-map run."""

    stage = "pipeline"

    def user_message(self) -> str:
        return "❌ Something went wrong while building the faction map."


class InvalidInput(FactionMapError):
    stage = "parse"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def user_message(self) -> str:
        return f"⚠️ {self.reason}\n{USAGE_HINT}"


class FactionNotFound(FactionMapError):
    stage = "presence"

    def __init__(self, faction: str):
        super().__init__(f"faction not found: {faction!r}")
        self.faction = faction

    def user_message(self) -> str:
        return (
            f"❌ No systems found for faction **{self.faction}**. "
            "Faction names must match exactly, including upper/lower case."
        )


class UpstreamFetchError(FactionMapError):
    def __init__(self, stage: str, detail: str, faction: Optional[str] = None):
        super().__init__(f"{stage}: {detail}")
        self.stage = stage
        self.detail = detail
        self.faction = faction

    def user_message(self) -> str:
        if self.faction:
            return f"❌ Couldn’t fetch data for **{self.faction}** from the BGS service. Try again later."
        return "❌ Couldn’t fetch data from the BGS service. Try again later."


class NoDataToRender(FactionMapError):
    stage = "render"

    def __init__(self):
        super().__init__("no resolved systems to render")

    def user_message(self) -> str:
        return "ℹ️ Neither faction has any systems with known coordinates, so there is nothing to map."
