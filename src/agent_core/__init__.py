"""ZK-constrained autonomous Bitcoin agent: strategy, commitments and proof pipeline."""

__version__ = "0.1.0"
