"""HomeValet providers - backends for external capabilities."""
