"""apix: add Hedera integrations to JavaScript projects."""

__version__ = "0.1.0"
