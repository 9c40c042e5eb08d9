# cogs/help.py
from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands


def _is_admin(u: discord.abc.User | discord.Member | None) -> bool:
    perms = getattr(u, "guild_permissions", None)
    return bool(perms and (perms.administrator or perms.manage_guild))


class HelpCog(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="help", description="Show all bot commands, what they do, and how to use them.")
    async def help(self, interaction: discord.Interaction):
        is_admin = _is_admin(interaction.user)

        # ---------- Embed: Faction map ----------
        e_map = discord.Embed(
            title="Faction Map — Commands",
            description=(
                "Compare two minor factions: where they share systems and where the rival sits "
                "close to the primary faction. Admin-only commands are marked 🔒."
            ),
            color=0x00BFFF,
        )
        e_map.add_field(
            name="/factionmap",
            value=(
                "Render a top-down map of both factions with proximity rings, plus the report.\n"
                "• Args: `factions` — `Primary Faction, Rival Faction`\n"
                "• Usage: `/factionmap factions: Canonn, Children of Raxxla`\n"
                "• **Names are case-sensitive** and must match the BGS database exactly."
            ),
            inline=False,
        )
        e_map.add_field(
            name="/factionreport",
            value=(
                "Same analysis without the image: shared systems and rival systems within range.\n"
                "• Args: `factions` — `Primary Faction, Rival Faction`"
            ),
            inline=False,
        )
        e_map.add_field(
            name="Reading the map",
            value=(
                "• Blue = primary faction, red = rival; bright = controls the system, dark = present only.\n"
                "• Orange ring = within the threshold of a system the other faction controls.\n"
                "• Yellow label = both factions are present in that system.\n"
                "• The yellow dot is Sol (0, 0); grid labels are in light years."
            ),
            inline=False,
        )

        # ---------- Embed: Admin / Setup ----------
        e_admin = discord.Embed(
            title="Admin & Setup",
            description="Server owners/admins can tune the analysis per guild.",
            color=0x3BA55C,
        )
        e_admin.add_field(
            name="🔒 /mapsettings",
            value=(
                "Set the proximity threshold, ring mode and labelling, or a report channel.\n"
                "• Args: `threshold_ly?`, `ring_mode?` (symmetric/asymmetric), `always_label_near_enemy?`,\n"
                "  `report_channel?`, `clear_report_channel?`\n"
                "• Example: `/mapsettings threshold_ly: 30 ring_mode: asymmetric`"
            ),
            inline=False,
        )
        e_admin.add_field(
            name="🔒 /settings_here",
            value="Show this guild’s faction map settings.",
            inline=False,
        )
        e_admin.add_field(
            name="🔒 /sync",
            value="Force-sync slash commands (use if commands were added/changed).",
            inline=False,
        )

        # annotate when the viewer isn’t an admin
        if not is_admin:
            e_admin.set_footer(
                text="You are not an admin here — commands marked 🔒 require Administrator or Manage Server."
            )

        await interaction.response.send_message(embeds=[e_map, e_admin], ephemeral=True)


async def setup(bot: commands.Bot):
    await bot.add_cog(HelpCog(bot))
