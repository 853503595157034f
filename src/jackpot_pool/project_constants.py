"""
Pool-wide immutable parameters for the jackpot pool.

These values define the public rules of every round.
Changing them changes payouts or timing and MUST be publicly announced.
"""

# Native coin uses 9 decimals
COIN_DECIMALS = 9
ONE_COIN = 10**COIN_DECIMALS

# Kept back on every payout for autonomous call fees & storage fees
RESERVE = 1 * ONE_COIN

# Protocol fee ceiling (percent)
MAX_FEE = 5

# Draw happens this many slots after the entry window closes
DRAW_DELAY = 4

# Scheduled end-of-round call stays valid for this many slots
DRAW_VALIDITY = 20

# Budget attached to the scheduled end-of-round call
DRAW_GAS_BUDGET = 10_000_000
DRAW_FEE_BUDGET = 0

# A manual relaunch must end strictly more than this many slots from now
MIN_RELAUNCH_LEAD = 50

# Longest round period accepted (slots); keeps slot + period well inside u64
MAX_PERIOD = 2**32

# Approximate slot duration on the target network (heuristic)
SLOT_SECONDS = 16.0

# Storage keys
OWNER_KEY = b"OWNER"
FEE_KEY = b"F"
NEXT_FEE_KEY = b"NF"
ENTRY_PRICE_KEY = b"EV"
NEXT_ENTRY_PRICE_KEY = b"N"
ROUND_END_KEY = b"JE"
ROUND_PERIOD_KEY = b"JP"
ENTRANTS_KEY = b"E"

# Endpoint invoked by the scheduled self-call
END_ROUND_FUNCTION = "endPool"
