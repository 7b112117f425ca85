"""Linear token-vesting grants with cliff, withdraw and revoke"""

__version__ = "0.1.0"
