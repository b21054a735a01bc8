"""dcrinstall - Download, verify and install Decred binary bundles."""

__version__ = "1.6.0"
