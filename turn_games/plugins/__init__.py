"""Game plugins. The set is closed: see `turn_games.registry.GAME_PLUGINS`."""
