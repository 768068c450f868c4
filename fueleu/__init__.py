"""FuelEU Maritime compliance, banking and pooling engine."""

__version__ = "1.0.0"
