# cogs/factionmap.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict

import discord
from discord import app_commands
from discord.ext import commands

from utils.settings import load_settings
from factionmap.errors import FactionMapError, InvalidInput
from factionmap.models import FactionMapResult
from factionmap.pipeline import options_from_settings, parse_faction_args, run_faction_map

logger = logging.getLogger(__name__)

MAP_FILENAME = "factionmap.png"
EMBED_COLOR = 0x00BFFF


# ----------------------- tiny logger -----------------------
def _log(gid: int | None, msg: str, extra: Dict[str, Any] | None = None, level: int = logging.INFO) -> None:
    base = f"[factionmap] [guild {gid}] {msg}"
    if extra:
        logger.log(level, f"{base} {json.dumps(extra, default=str, ensure_ascii=False)}")
        return
    logger.log(level, base)
# -----------------------------------------------------------


def build_embed(result: FactionMapResult) -> discord.Embed:
    embed = discord.Embed(
        title=f"🗺️ {result.primary.faction} vs {result.rival.faction}",
        description=result.summary,
        color=EMBED_COLOR,
    )
    for title, body in result.sections:
        embed.add_field(name=title, value=body, inline=False)
    if result.image is not None:
        embed.set_image(url=f"attachment://{MAP_FILENAME}")
    embed.set_footer(text="Data: EliteBGS · faction names are case-sensitive")
    return embed


class FactionMapCog(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="factionmap", description="Map two factions and where they sit close to each other")
    @app_commands.describe(factions="Primary faction, rival faction (comma-separated, exact case)")
    async def factionmap(self, interaction: discord.Interaction, factions: str):
        await self._run(interaction, factions, render_image=True)

    @app_commands.command(name="factionreport", description="Text-only proximity report for two factions")
    @app_commands.describe(factions="Primary faction, rival faction (comma-separated, exact case)")
    async def factionreport(self, interaction: discord.Interaction, factions: str):
        await self._run(interaction, factions, render_image=False)

    async def _run(self, interaction: discord.Interaction, factions: str, render_image: bool):
        gid = interaction.guild_id

        # bad input never reaches the network
        try:
            primary, rival = parse_faction_args(factions)
        except InvalidInput as e:
            _log(gid, "invalid input", {"raw": factions, "reason": e.reason})
            return await interaction.response.send_message(e.user_message(), ephemeral=True)

        await interaction.response.defer(thinking=True)

        st = load_settings(gid)
        options = options_from_settings(st, render_image=render_image)
        _log(gid, "command invoked", {
            "channel": interaction.channel_id,
            "primary": primary,
            "rival": rival,
            "threshold_ly": options.threshold_ly,
            "ring_mode": options.ring_mode,
            "image": render_image,
        })

        try:
            result = await run_faction_map(primary, rival, options)
        except FactionMapError as e:
            _log(gid, "pipeline failed", {
                "stage": e.stage,
                "primary": primary,
                "rival": rival,
                "error": repr(e),
            }, level=logging.WARNING)
            return await interaction.followup.send(e.user_message())
        except Exception as e:
            logger.error(f"[Guild {gid}] factionmap crashed for {primary!r} vs {rival!r}: {e}", exc_info=True)
            return await interaction.followup.send("❌ Failed to build the faction map. See logs for details.")

        _log(gid, "pipeline done", {
            "primary_systems": len(result.primary),
            "rival_systems": len(result.rival),
            "overlap": len(result.report.overlap_systems),
            "nearby": len(result.report.nearby),
        })

        embed = build_embed(result)

        def _payload() -> Dict[str, Any]:
            payload: Dict[str, Any] = {"embed": embed}
            if result.image is not None:
                result.image.seek(0)
                payload["file"] = discord.File(result.image, filename=MAP_FILENAME)
            return payload

        # ----------- post to report channel if set ------------
        report_ch_id = st.get("report_channel_id")
        if report_ch_id and int(report_ch_id) != interaction.channel_id:
            ch = interaction.client.get_channel(int(report_ch_id))
            if isinstance(ch, discord.TextChannel):
                try:
                    await ch.send(**_payload())
                    _log(gid, "posted to report channel", {"channel": report_ch_id})
                    return await interaction.followup.send(f"📡 Posted the faction map in {ch.mention}.")
                except discord.HTTPException as e:
                    _log(gid, "failed posting to report channel", {"error": repr(e)}, level=logging.WARNING)

        # Fallback to replying where invoked
        await interaction.followup.send(**_payload())


async def setup(bot: commands.Bot):
    await bot.add_cog(FactionMapCog(bot))
