"""AlliedChess: two allied factions against a minimax Enemy."""

__version__ = "0.1.0"
