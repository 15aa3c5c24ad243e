"""The Panasonic Blu-ray player integration."""
