"""Protocol constants for the StableSwap pool.

Tunable limits (fees, minimum amounts, timelocks) live in
stableswap.config.PoolConfig; the values here are fixed by the math.
"""

# Number of assets in the pool (the invariant is specialised for two)
N_COINS = 2

# Newton's method bounds
MAX_ITERATIONS = 255
CONVERGENCE_THRESHOLD = 1

# Amplification bounds
MIN_AMPLIFICATION = 1
MAX_AMPLIFICATION = 10_000

# LP tokens locked forever on the first deposit (minted to no one)
MINIMUM_LIQUIDITY = 1000

# Fee denominators
BPS_DENOMINATOR = 10_000
PERCENT_DENOMINATOR = 100

# Basis points distance from a 50/50 pool that counts as fully imbalanced
BALANCED_RATIO_BPS = 5_000

# Migration path: flat 0.1337% fee
MIGRATION_FEE_NUMERATOR = 1337
MIGRATION_FEE_DENOMINATOR = 1_000_000

# Fixed-point scale of the farming reward-per-share accumulator
ACC_REWARD_PRECISION = 10**12

# Amplification commit hash length (sha256)
COMMIT_HASH_LENGTH = 32
