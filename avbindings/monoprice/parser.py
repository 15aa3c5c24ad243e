"""Status line parsing for Monoprice/Xantech amplifiers."""

import logging
from typing import Optional

from ..exceptions import MalformedResponse
from .models import NUMERIC_FIELDS, ZoneStatus
from .profiles import DeviceProfile

_LOGGER = logging.getLogger(__name__)


def parse(raw_line: str, profile: DeviceProfile) -> Optional[ZoneStatus]:
    """Parse one status line with the model's response formats.

    Formats are tried in profile order and the first match wins.

    Args:
        raw_line: Line as received from the amplifier
        profile: Model profile

    Returns:
        ZoneStatus holding the captured fields, or None if no format matches

    Raises:
        MalformedResponse: A numeric field captured a non-numeric value
    """
    line = raw_line.strip()
    if not line:
        return None

    for response in profile.responses:
        match = response.pattern.match(line)
        if not match:
            continue

        status = ZoneStatus()
        for name, value in zip(response.fields, match.groups()):
            if name in NUMERIC_FIELDS:
                try:
                    value = int(value)
                except ValueError as err:
                    raise MalformedResponse(
                        f"Non-numeric {name} '{value}' in status line: {line}"
                    ) from err
            setattr(status, name, value)
        return status

    _LOGGER.debug("No %s status format matches line: %r", profile.name, line)
    return None


def format_status(status: ZoneStatus, profile: DeviceProfile) -> str:
    """Render a status line the way the amplifier reports it.

    The first response format whose fields are exactly the populated fields of
    the status is used.

    Raises:
        ValueError: No response format fits the populated fields
    """
    values = status.populated()
    for response in profile.responses:
        if set(response.fields) == set(values):
            return response.template.format(**values)

    raise ValueError(
        f"No {profile.name} status format for fields {sorted(values)}"
    )
