"""Protocol constants for the pool core.

Centralizes precision scales, fee bounds and amplification limits.
"""

# Basis-point denominator (10000 bps = 100%)
BPS_DENOMINATOR = 10_000

# Maximum swap fee and protocol fee share (1000 bps = 10%)
MAX_FEE_BPS = 1_000
MAX_PROTOCOL_FEE_BPS = 1_000

# Shares permanently burned on the first deposit so total_liquidity
# never returns to zero once a pool is initialized
MINIMUM_LIQUIDITY = 1_000

# First deposit must mint at least this many shares (10x the burned floor)
MIN_INITIAL_LIQUIDITY = 10 * MINIMUM_LIQUIDITY

# Fee-per-share accumulator scale, also used for price ratios
ACC_PRECISION = 10**12

# Scale for caller-supplied max price limits (amount_in / amount_out)
PRICE_SCALE = 10**9

# Default cap on price impact for a single swap (10%)
DEFAULT_MAX_PRICE_IMPACT_BPS = 1_000

# Stable curve: number of coins and solver limits
N_COINS = 2
MAX_SOLVER_ITERATIONS = 64
# Relative convergence: |D' - D| * RELATIVE_TOLERANCE_INV <= D'  (1e-15)
RELATIVE_TOLERANCE_INV = 10**15

# Amplification bounds and ramping limits
MIN_AMP = 1
MAX_AMP = 10_000
MAX_AMP_CHANGE = 10
MIN_RAMP_DURATION_MS = 86_400_000  # 1 day

# Pool curve identifiers
CURVE_CONSTANT_PRODUCT = "constant_product"
CURVE_STABLE = "stable"
