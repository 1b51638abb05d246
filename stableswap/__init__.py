"""StableSwap Pool Engine - two-asset Curve-style pools in Python."""

__version__ = "0.1.0"

from stableswap.engine import StableSwapEngine  # noqa: E402
from stableswap.ledger import InMemoryLedger, LedgerAccount  # noqa: E402

__all__ = ["InMemoryLedger", "LedgerAccount", "StableSwapEngine", "__version__"]
