"""Sales consolidation: synthetic input generation and ranked sales reports."""
__version__ = "1.0.0"
