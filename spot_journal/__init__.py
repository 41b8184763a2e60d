"""Spot trade journal: FIFO reconstruction of round-trip trades from exchange fills."""
