"""
League Bot - Discord companion for a competitive Brawl Stars league

Core Components:

- **Free Agents**: Players without a team can advertise themselves in a public
  channel. Advertisements expire, are withdrawn when the player joins a team,
  and are refreshed with live stats by a periodic sweep.
- **Verification**: Players link their Brawl Stars tag, checked against the
  official API.
- **Ping Role Sync**: Every rostered player receives the league's ping role.

Usage:
    from leaguebot.main import main
    main()
"""
