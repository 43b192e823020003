"""CrateKeeper - disk scanning and catalog reconciliation for music libraries."""

__version__ = "0.3.0"
