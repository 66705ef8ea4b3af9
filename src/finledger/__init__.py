"""Finance ledger derivation and cost-basis engine."""

__version__ = "0.1.0"
