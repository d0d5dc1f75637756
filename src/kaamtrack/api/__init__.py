"""HTTP binding for the KaamTrack services."""
