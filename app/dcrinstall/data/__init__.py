"""Bundled data files (theme, sample configs, public keys)."""
