"""Recipe import core: format parsers and ingredient label decomposition."""

__version__ = "0.1.0"
