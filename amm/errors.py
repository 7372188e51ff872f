"""AMM error classes.

Every error aborts the whole operation. The classes form a small taxonomy
(InvalidInput, InsufficientLiquidity, ExcessivePriceImpact, Overflow,
ConvergenceFailure, Expired, PoolPaused); subclasses tag the specific
invariant that was violated via ``code``.
"""


class AmmError(Exception):
    """Base error for pool operations."""

    code: str = "amm_error"

    def __init__(self, message: str = "", *, code: str | None = None) -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)
        if code is not None:
            self.code = code


# --- Taxonomy ---


class InvalidInput(AmmError):
    """Invalid argument: zero amount, out-of-range parameter, wrong pairing."""

    code = "invalid_input"


class InsufficientLiquidity(AmmError):
    """Payout below minimum, empty reserves, or invariant decreased."""

    code = "insufficient_liquidity"


class ExcessivePriceImpact(AmmError):
    """Trade moves the price beyond the configured cap."""

    code = "excessive_price_impact"


class Overflow(AmmError):
    """Intermediate value exceeds its widened integer range."""

    code = "overflow"


class ConvergenceFailure(AmmError):
    """Iterative invariant solver did not reach tolerance."""

    code = "convergence_failure"


class Expired(AmmError):
    """Request deadline has passed."""

    code = "expired"


class PoolPaused(AmmError):
    """Pool is paused; mutating operations are rejected."""

    code = "pool_paused"


# --- InvalidInput ---


class ZeroAmount(InvalidInput):
    """Amount must be positive."""

    code = "zero_amount"


class InvalidFee(InvalidInput):
    """Fee tier must be at most 1000 bps (10%)."""

    code = "invalid_fee"


class InvalidAmplification(InvalidInput):
    """Amplification outside its valid range or ramp too large/fast."""

    code = "invalid_amplification"


class PositionMismatch(InvalidInput):
    """Position does not belong to this pool or is already closed."""

    code = "position_mismatch"


class InsufficientShares(InvalidInput):
    """Position does not hold enough shares for the request."""

    code = "insufficient_shares"


# --- InsufficientLiquidity ---


class EmptyReserves(InsufficientLiquidity):
    """Pool has no liquidity to trade against."""

    code = "empty_reserves"


class SlippageExceeded(InsufficientLiquidity):
    """Output below the caller's minimum."""

    code = "slippage_exceeded"


class InvariantViolation(InsufficientLiquidity):
    """Pool invariant decreased after a state transition."""

    code = "invariant_violation"


class InsufficientInitialLiquidity(InsufficientLiquidity):
    """First deposit mints fewer shares than the required minimum."""

    code = "insufficient_initial_liquidity"


# --- ExcessivePriceImpact ---


class PriceLimitExceeded(ExcessivePriceImpact):
    """Execution price above the caller's maximum price."""

    code = "price_limit_exceeded"


# --- Overflow ---


class RoundingDrift(Overflow):
    """Splitting a fee debt drifted beyond its rounding tolerance."""

    code = "rounding_drift"
