# cogs/admin_misc.py
from typing import Literal, Optional

import discord
from discord import app_commands
from discord.ext import commands
from utils.settings import load_settings, save_settings

def admin_check():
    def pred(i: discord.Interaction):
        perms = getattr(i.user, "guild_permissions", None)
        return bool(perms and (perms.administrator or perms.manage_guild))
    return app_commands.check(lambda i: pred(i))

def _fmt_settings(s: dict) -> str:
    report_ch = f"<#{s['report_channel_id']}>" if s.get("report_channel_id") else "*not set (reply in place)*"
    return (
        f"• Proximity threshold: **{float(s.get('threshold_ly') or 0):g} ly**\n"
        f"• Ring mode: **{s.get('ring_mode')}**\n"
        f"• Always label near-enemy systems: **{'yes' if s.get('always_label_near_enemy') else 'no'}**\n"
        f"• Report channel: {report_ch}"
    )

class AdminMisc(commands.Cog):
    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(name="sync", description="Force sync slash commands (admin only)")
    @admin_check()
    async def sync(self, interaction: discord.Interaction):
        cmds = await interaction.client.tree.sync()
        await interaction.response.send_message(f"✅ Synced {len(cmds)} command(s).", ephemeral=True)

    @app_commands.guild_only()
    @app_commands.command(name="settings_here", description="Show faction map settings for this guild")
    @admin_check()
    async def settings_here(self, interaction: discord.Interaction):
        s = load_settings(interaction.guild_id)
        await interaction.response.send_message(
            f"**Current Settings for {interaction.guild.name}**\n{_fmt_settings(s)}",
            ephemeral=True
        )

    @app_commands.guild_only()
    @app_commands.command(name="mapsettings", description="Configure the faction map for this guild (admin only)")
    @app_commands.describe(
        threshold_ly="Proximity threshold in light years (e.g. 30, 50, 200)",
        ring_mode="symmetric: ring both factions; asymmetric: ring primary-faction systems only",
        always_label_near_enemy="Always label ringed systems, even in crowded areas",
        report_channel="Post results in this channel instead of replying in place",
        clear_report_channel="Go back to replying in place",
    )
    @admin_check()
    async def mapsettings(
        self,
        interaction: discord.Interaction,
        threshold_ly: Optional[app_commands.Range[float, 1.0, 1000.0]] = None,
        ring_mode: Optional[Literal["symmetric", "asymmetric"]] = None,
        always_label_near_enemy: Optional[bool] = None,
        report_channel: Optional[discord.TextChannel] = None,
        clear_report_channel: bool = False,
    ):
        updates = {}
        if threshold_ly is not None:
            updates["threshold_ly"] = float(threshold_ly)
        if ring_mode is not None:
            updates["ring_mode"] = ring_mode
        if always_label_near_enemy is not None:
            updates["always_label_near_enemy"] = always_label_near_enemy
        if report_channel is not None:
            updates["report_channel_id"] = report_channel.id
        elif clear_report_channel:
            updates["report_channel_id"] = None

        if updates:
            s = save_settings(interaction.guild_id, updates)
            head = "✅ Settings updated."
        else:
            s = load_settings(interaction.guild_id)
            head = "ℹ️ Nothing to change."
        await interaction.response.send_message(f"{head}\n{_fmt_settings(s)}", ephemeral=True)

async def setup(bot):
    await bot.add_cog(AdminMisc(bot))
