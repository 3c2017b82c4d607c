"""Discord cogs: slash commands and background schedulers."""
