"""The Monoprice/Xantech multi-zone amplifier integration."""
