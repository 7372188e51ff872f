"""Integer math for pool pricing."""

from amm.math.stable_math import calc_out_given_in, get_d, get_y, marginal_rate
from amm.math.wide_math import constant_product_output, mul_div, quote, sqrt

__all__ = [
    # Constant product
    "constant_product_output",
    "mul_div",
    "quote",
    "sqrt",
    # Stable curve
    "calc_out_given_in",
    "get_d",
    "get_y",
    "marginal_rate",
]
