"""CodeForge GitHub Action: trigger SDK generation from a CI workflow."""

__version__ = "0.3.0"
