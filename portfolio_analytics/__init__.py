"""Portfolio analytics — allocation, regime, sentiment, yield and ROI derivations."""

__version__ = "0.1.0"
