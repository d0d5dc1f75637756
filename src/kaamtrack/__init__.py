"""KaamTrack - attendance and wage ledger for daily-wage workers."""

__version__ = "0.1.0"
