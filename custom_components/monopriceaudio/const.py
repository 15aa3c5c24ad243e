"""Constants for the Monoprice/Xantech amplifier integration."""

DOMAIN = "monopriceaudio"

DEFAULT_NAME = "Amplifier"

CONF_MODEL = "model"
CONF_REFRESH = "refresh"
CONF_NUM_ZONES = "num_zones"
CONF_IGNORE_ZONES = "ignore_zones"
CONF_INPUT_LABELS = "input_labels"

# Extra state attributes
ATTR_ZONE_NAME = "zone_name"
ATTR_TREBLE = "treble"
ATTR_BASS = "bass"
ATTR_BALANCE = "balance"
ATTR_DND = "dnd"
