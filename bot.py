# bot.py
import os
import asyncio
import logging
import discord
from discord.ext import commands

# --- Logging ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# --- Discord setup ---
INTENTS = discord.Intents.default()
BOT = commands.Bot(command_prefix="!", intents=INTENTS, help_command=None)

EXTENSIONS = (
    "cogs.factionmap",
    "cogs.admin_misc",
    "cogs.help",
)

@BOT.event
async def on_ready():
    logger.info(f"Logged in as {BOT.user} ({BOT.user.id})")
    try:
        synced = await BOT.tree.sync()
        logger.info(f"Synced {len(synced)} command(s).")
    except Exception as e:
        logger.error(f"Slash sync failed: {e}", exc_info=True)

@BOT.event
async def on_guild_join(guild: discord.Guild):
    logger.info(f"Joined guild {guild.name} ({guild.id})")

@BOT.tree.error
async def on_app_command_error(interaction: discord.Interaction, error: discord.app_commands.AppCommandError):
    if isinstance(error, discord.app_commands.CheckFailure):
        msg = "🔒 This command requires Administrator or Manage Server."
    else:
        logger.error(f"Command {getattr(interaction.command, 'name', '?')} failed: {error}", exc_info=error)
        msg = "❌ Something went wrong. See logs for details."
    if interaction.response.is_done():
        await interaction.followup.send(msg, ephemeral=True)
    else:
        await interaction.response.send_message(msg, ephemeral=True)

async def main():
    async with BOT:
        for ext in EXTENSIONS:
            await BOT.load_extension(ext)

        token = os.environ.get("DISCORD_TOKEN")
        if not token:
            raise RuntimeError("DISCORD_TOKEN env var not set.")
        await BOT.start(token)

if __name__ == "__main__":
    asyncio.run(main())
