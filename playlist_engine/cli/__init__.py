"""Developer CLI for the playlist engine."""
