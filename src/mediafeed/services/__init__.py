"""Core services: checksum relay, identity, post aggregate, feed and uploads."""
