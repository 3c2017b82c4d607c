"""
Configuration management for the league bot.

- **app_configuration.py**: YAML configuration loader that builds the typed
  ``LeagueSettings`` (guild, channel and role ids, advertisement windows,
  sweep intervals, stats API endpoint) injected into the services.
"""
