"""Constants for the Panasonic Blu-ray player integration."""

DOMAIN = "panasonicbr"

DEFAULT_NAME = "Panasonic Blu-ray"

CONF_PLAYER_KEY = "player_key"
CONF_REFRESH = "refresh"
CONF_MODEL = "model"

SERVICE_SEND_BUTTON = "send_button"
ATTR_BUTTON = "button"

# Extra state attributes
ATTR_PLAYER_STATUS = "player_status"
ATTR_CHAPTER_CURRENT = "chapter_current"
ATTR_CHAPTER_TOTAL = "chapter_total"
