"""Read Lichess PGN dumps, sample the games and upload them to an opening explorer."""

__version__ = "0.1.0"