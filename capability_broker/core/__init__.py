"""Cross-cutting infrastructure shared by every component (logging, monitoring)."""
