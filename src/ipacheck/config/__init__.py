"""Configuration loading for ipacheck."""
