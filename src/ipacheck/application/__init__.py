"""Application layer: check execution, report rendering and the audit run."""
