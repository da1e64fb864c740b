"""Protocol constants for the covered-call curve engine.

Centralizes fixed-point scales, time conventions and numeric tolerances.
"""

# 18-decimal fixed-point unit ("WAD")
WAD = 10**18

# Time conventions
SECONDS_PER_DAY = 86_400
# Annualization basis for tau and implied rates (365-day year)
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY

# Maximum |tradingFunction| (in WAD units of the quantile-space residual)
# a state may settle into. Absolute, not scaled with pool size.
TRADING_FUNCTION_TOLERANCE = 100

# Bisection cap for the trade sizing search
MAX_SEARCH_ITERATIONS = 256

# Default relative tolerance for the sizing search (0.01%)
DEFAULT_SEARCH_EPSILON = 10**14

# Strike/liquidity anchoring: maximum passes and the relative precision at
# which the solved liquidity is considered stable (1 part in 10^12)
ANCHOR_MAX_ITERATIONS = 32
ANCHOR_PRECISION = 10**12

# Range a reserve ratio (x/L or y/(K*L)) may take while quantiles price the
# curve: [1%, 99%]. Solvers reject inputs and results outside it.
MIN_RESERVE_RATIO = 10**16
MAX_RESERVE_RATIO = WAD - MIN_RESERVE_RATIO
