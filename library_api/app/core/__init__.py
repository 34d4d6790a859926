"""Cross-cutting infrastructure: settings, logging, errors and storage."""
