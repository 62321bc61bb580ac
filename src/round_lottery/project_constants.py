"""
Project-wide immutable parameters for the round lottery.

These values define the public rules of every round.
Changing them changes payouts and MUST be publicly announced.
"""

# Ticket price when a round is created without one (smallest currency unit)
DEFAULT_TICKET_PRICE = 100

# Rounds close 7 days after creation / reset
ROUND_DURATION_S = 7 * 24 * 60 * 60

# Seed counter value of a fresh round
INITIAL_SEED_COUNTER = 1

# Generic Substrate address format
DEFAULT_SS58_PREFIX = 42

# Twox128("Timestamp") ++ Twox128("Now")
TIMESTAMP_NOW_STORAGE_KEY = (
    "0xf0c365c3cf59d671eb72da0e7a4113c49f1f0515f462cdcf84e0f1d6045dfcbb"
)
