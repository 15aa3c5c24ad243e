#!/usr/bin/env python3
"""
Fake Monoprice/Xantech Amplifier Server

Simulates a multi-zone amplifier behind a serial-over-IP bridge so the client
can be tested without hardware. Any model profile can be served.

Usage:
    python3 -m tests.fake_device.amplifier --port 4999 --model amplifier --mode normal

Modes:
    - normal: Standard responses
    - hang: Stops responding after N commands (tests timeouts)
    - garbage: Answers queries with a line no status format matches

A reply delay (FakeAmplifier.delay) stands in for a slow serial link.
"""

import argparse
import asyncio
import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from avbindings.monoprice.models import ZoneStatus
from avbindings.monoprice.parser import format_status
from avbindings.monoprice.profiles import DeviceProfile, get_profile

_LOGGER = logging.getLogger(__name__)


class FakeAmplifier:
    """Fake amplifier for testing."""

    def __init__(self, profile: DeviceProfile, mode: str = "normal", hang_after: int = 0,
                 delay: float = 0.0):
        self.profile = profile
        self.mode = mode
        self.hang_after = hang_after
        self.delay = delay
        self.commands: List[str] = []

        p = profile
        off = p.off_str
        self.zones: Dict[str, ZoneStatus] = {
            zone_id: ZoneStatus(
                zone=zone_id,
                page=off,
                power=off,
                mute=off,
                dnd=off,
                volume=13,
                treble=p.tone_offset,
                bass=p.tone_offset,
                balance=p.bal_offset,
                source=p.format_number(p.first_source),
                keypad=p.on_str,
            )
            for zone_id in p.zone_ids
        }

        self._set_fields = {
            p.power_cmd: "power",
            p.source_cmd: "source",
            p.volume_cmd: "volume",
            p.mute_cmd: "mute",
            p.treble_cmd: "treble",
            p.bass_cmd: "bass",
            p.balance_cmd: "balance",
        }
        if p.supports_dnd:
            self._set_fields[p.dnd_cmd] = "dnd"

    def _split_zone(self, body: str) -> Tuple[Optional[str], str]:
        """Split "<zone id><rest>", preferring the longest zone id."""
        for zone_id in sorted(self.profile.zone_ids, key=len, reverse=True):
            if body.startswith(zone_id):
                return zone_id, body[len(zone_id):]
        return None, body

    def status_line(self, zone_id: str, fields: Tuple[str, ...]) -> str:
        """Render the zone's current status with the given response fields."""
        full = self.zones[zone_id]
        partial = ZoneStatus(**{name: getattr(full, name) for name in fields})
        return format_status(partial, self.profile)

    def process_command(self, command: str) -> str:
        """Process a command line and return the response."""
        p = self.profile
        self.commands.append(command)
        command = command.strip()
        if command.endswith("+"):
            command = command[:-1]
        _LOGGER.info("[CMD #%d] %s", len(self.commands), command)

        # Hang mode: stop responding after N commands
        if self.mode == "hang" and len(self.commands) > self.hang_after:
            _LOGGER.warning("HANG MODE: Not responding")
            return ""

        # Query: ?<zone><suffix>  or  ?<zone><TR|BS|BA> for single fields
        if command.startswith(p.query_prefix) and not command.startswith(p.cmd_prefix):
            zone_id, rest = self._split_zone(command[len(p.query_prefix):])
            if zone_id is None:
                return "Command Error.\r\n"
            if self.mode == "garbage":
                return "#>ZZ\r\n"

            if rest == p.query_suffix:
                return self.status_line(zone_id, p.responses[0].fields) + "\r\n"

            field_name = self._set_fields.get(rest)
            for response in p.responses:
                if response.fields == ("zone", field_name):
                    return self.status_line(zone_id, response.fields) + "\r\n"
            return "Command Error.\r\n"

        # Set: <prefix><zone><token><value>
        if command.startswith(p.cmd_prefix):
            zone_id, rest = self._split_zone(command[len(p.cmd_prefix):])
            field_name = self._set_fields.get(rest[:2])
            if zone_id is None or field_name is None:
                _LOGGER.warning("Unknown command: %s", command)
                return "Command Error.\r\n"

            value = rest[2:]
            if field_name in ("volume", "treble", "bass", "balance"):
                value = int(value)
            self.zones[zone_id] = replace(self.zones[zone_id], **{field_name: value})
            return ""

        _LOGGER.warning("Unknown command: %s", command)
        return "Command Error.\r\n"


class FakeAmplifierServer:
    """TCP server for the fake amplifier."""

    def __init__(self, device: FakeAmplifier, host: str = "127.0.0.1", port: int = 0):
        self.host = host
        self.port = port
        self.device = device
        self._server: Optional[asyncio.AbstractServer] = None
        self._writers: List[asyncio.StreamWriter] = []

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle a client connection."""
        addr = writer.get_extra_info("peername")
        _LOGGER.info("Client connected: %s", addr)
        self._writers.append(writer)

        try:
            while True:
                data = await reader.readuntil(b"\r")
                command = data.decode("ascii", errors="ignore")
                if not command.strip():
                    continue

                response = self.device.process_command(command)
                if response:
                    if self.device.delay:
                        await asyncio.sleep(self.device.delay)
                    writer.write(response.encode("ascii"))
                    await writer.drain()

        except (asyncio.IncompleteReadError, ConnectionError):
            _LOGGER.info("Client disconnected: %s", addr)
        finally:
            writer.close()
            self._writers.remove(writer)

    async def start(self) -> int:
        """Start listening; returns the bound port."""
        self._server = await asyncio.start_server(self.handle_client, self.host, self.port)
        self.port = self._server.sockets[0].getsockname()[1]
        _LOGGER.info("Fake %s amplifier listening on %s:%d", self.device.profile.name, self.host, self.port)
        return self.port

    async def stop(self) -> None:
        """Stop listening and drop connected clients."""
        if self._server is None:
            return
        self._server.close()
        for writer in list(self._writers):
            writer.close()
        await self._server.wait_closed()
        self._server = None


async def main():
    parser = argparse.ArgumentParser(description="Fake Monoprice/Xantech Amplifier Server")
    parser.add_argument("--host", default="127.0.0.1", help="Listen address")
    parser.add_argument("--port", type=int, default=4999, help="Listen port")
    parser.add_argument("--model", default="amplifier", help="Amplifier model")
    parser.add_argument("--mode", choices=["normal", "hang", "garbage"],
                        default="normal", help="Failure mode")
    parser.add_argument("--hang-after", type=int, default=0,
                        help="Commands before hang (only for hang mode)")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG)

    device = FakeAmplifier(get_profile(args.model), mode=args.mode, hang_after=args.hang_after)
    server = FakeAmplifierServer(device, args.host, args.port)
    await server.start()
    await asyncio.Event().wait()


if __name__ == "__main__":
    asyncio.run(main())
