"""Console bank simulator: accounts, sessions, transaction logs and an anomaly monitor."""

__version__ = "0.1.0"