"""External system integrations used by ipacheck."""
