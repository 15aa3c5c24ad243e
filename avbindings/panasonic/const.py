"""Constants for the Panasonic Blu-ray binding."""

MODEL_BD_PLAYER = "bd_player"
MODEL_UHD_PLAYER = "uhd_player"
PLAYER_MODELS = (MODEL_BD_PLAYER, MODEL_UHD_PLAYER)

# UHD players do not answer the extended playback status query
EXTENDED_STATUS_MODELS = frozenset({MODEL_BD_PLAYER})

CONTROL_URL = "http://{host}/WAN/dvdr/dvdr_ctrl.cgi"
NONCE_URL = "http://{host}/cgi-bin/get_nonce.cgi"

DEFAULT_REFRESH = 10  # seconds
MIN_REFRESH = 10  # seconds
DEFAULT_TIMEOUT = 5.0  # seconds

USER_AGENT = "MEI-LAN-REMOTE-CALL"
HASH_ALGORITHM = "sha256"
DIGEST_MIN_LENGTH = 32
AUTH_FORM = "C4"

CRLF = "\r\n"
COMMA = ","

# Channel ids
POWER = "power"
BUTTON = "button"
CONTROL = "control"
PLAYER_STATUS = "player_status"
PLAY_MODE = "play_mode"
TIME_ELAPSED = "time_elapsed"
TIME_TOTAL = "time_total"
CHAPTER_CURRENT = "chapter_current"
CHAPTER_TOTAL = "chapter_total"

PLAYBACK_CHANNELS = (TIME_ELAPSED, TIME_TOTAL, CHAPTER_CURRENT, CHAPTER_TOTAL)

# Play modes reported by the PST query
MODE_STOP = "0"
MODE_PLAY = "1"
MODE_PAUSE = "2"

STOP = "STOP"
PLAY = "PLAY"
PAUSE = "PAUSE"
UNKNOWN = "UNKNOWN"

PLAY_MODE_MAP = {
    MODE_STOP: STOP,
    MODE_PLAY: PLAY,
    MODE_PAUSE: PAUSE,
}

# Player status codes reported by the REVIEW query
OFF_STATUS = "07"
STATUS_MAP = {
    "00": "STOPPED",
    "01": "TRAY OPEN",
    "02": "REV PLAYBACK",
    "05": "CUE PLAYBACK",
    "06": "SLOW FORWARD PLAYBACK",
    "07": "POWER OFF",
    "08": "PLAYBACK",
    "09": "PAUSE PLAYBACK",
    "86": "SLOW BACKWARD PLAYBACK",
}

# Ticks during which a power reading contradicting the last power command is ignored
POWER_DEBOUNCE_TICKS = 2

POWER_ON_CMD = "POWERON"
POWER_OFF_CMD = "POWEROFF"

# control channel value -> player button
CONTROL_CMDS = {
    "PLAY": "PLAYBACK",
    "PAUSE": "PAUSE",
    "STOP": "STOP",
    "NEXT": "SKIPFWD",
    "PREVIOUS": "SKIPREV",
    "FASTFORWARD": "CUE",
    "REWIND": "REV",
}


def command_fields(command: str) -> dict:
    """Form body that presses a button on the player."""
    return {f"cCMD_{command}.x": "100", f"cCMD_{command}.y": "100"}


# pre-built POST bodies for the status calls
PST_POST_CMD = command_fields("PST")
STATUS_POST_CMD = command_fields("GET_STATUS")
REVIEW_POST_CMD = command_fields("REVIEW")
GET_NONCE_CMD = {"SID": "1234ABCD"}

# Command value asking for a state refresh instead of an action
REFRESH = "REFRESH"
