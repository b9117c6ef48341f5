"""Flask web frontend for LGPD Guardian."""
