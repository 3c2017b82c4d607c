"""Plain data types shared across the league bot."""
