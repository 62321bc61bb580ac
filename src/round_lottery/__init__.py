"""Round-based lottery: timed ticket sales, pseudo-random draw, payout and reset."""
