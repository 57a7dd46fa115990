"""Reference extraction and validation."""
