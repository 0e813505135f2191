"""Command line interface for ipacheck."""
