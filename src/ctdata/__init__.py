"""ctdata — portable, tamper-evident exchange for combat tracker data."""

__version__ = "0.3.0"
