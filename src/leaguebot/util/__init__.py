"""
Utility helpers for the league bot.

- **logger.py**: Centralized logging configuration with colored console output,
  a per-session rotating log file, and suppression of noisy library loggers.
"""
