"""
astro_core: integer accounting core for the fee distributor, staking pool and AMM math.
"""

__version__ = "0.1.0"
