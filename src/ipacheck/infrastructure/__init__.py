"""Cross-cutting infrastructure: logging and the error taxonomy."""
