"""
League services.

- **free_agent_service.py**: Free agent lifecycle reconciler (renew, toggle, sweep).
- **role_sync_service.py**: Ping role propagation to team rosters.
- **verification_service.py**: Player tag verification.
- **platform_client.py**: Discord operations normalised for the services.
- **stats_client.py**: Best-effort Brawl Stars API client.
"""
