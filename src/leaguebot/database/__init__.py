"""
Database package for the league bot.

- **db_connection.py**: Single long-lived aiosqlite connection with serialised
  write transactions.
- **db_schema.py**: Table and index creation for players, teams and rosters.
"""
