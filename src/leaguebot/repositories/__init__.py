"""
Persistence for players and teams.

Each module holds a connection-scoped repository (raw SQL) and a store bound
to the shared connection manager.
"""
