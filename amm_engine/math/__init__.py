"""Integer math for the pool engine."""

from amm_engine.math.amm_math import ConstantProduct, constant_product
from amm_engine.math.u256 import U256, mul_u128, product_ge

__all__ = [
    "ConstantProduct",
    "constant_product",
    "U256",
    "mul_u128",
    "product_ge",
]
