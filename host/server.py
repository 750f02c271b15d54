from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import websockets

from bots.policy import HeuristicPolicy
from holdem.errors import ConfigError, IllegalAction
from holdem.models import TableConfig, TableSnapshot
from holdem.tournament import DecisionPolicy, Tournament

from .session import TableSession

LOGGER = logging.getLogger("holdem.host.server")

# One WebSocket connection = one presentation client driving the human seat of
# its own table. Rendering lives on the client; this only relays intents and
# snapshots.


class HostServerError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


def _config_payload(config: TableConfig) -> Dict[str, Any]:
    return {
        "seats": config.seats,
        "starting_stack": config.starting_stack,
        "sb": config.sb,
        "bb": config.bb,
        "human_seat": config.human_seat,
    }


def _envelope(msg_type: str, payload: Dict[str, Any]) -> str:
    body: Dict[str, Any] = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
    body.update(payload)
    return json.dumps(body)


def _decode(raw: Any) -> Dict[str, Any]:
    try:
        message = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return {}
    return message if isinstance(message, dict) else {}


class TableConnection:
    def __init__(
        self,
        websocket: websockets.ServerConnection,
        base_config: TableConfig,
        policy: Optional[DecisionPolicy] = None,
    ) -> None:
        self.websocket = websocket
        self.base_config = base_config
        self.policy = policy or HeuristicPolicy()
        self.session: Optional[TableSession] = None

    async def run(self) -> None:
        hello = await self._read_message()
        if hello is None or hello.get("type") != "hello":
            await self.send_error("BAD_HELLO", "Expected hello")
            return
        try:
            config = self._config_from_hello(hello)
            tournament = Tournament(config, self.policy)
        except (ConfigError, HostServerError) as exc:
            code = exc.code if isinstance(exc, HostServerError) else "BAD_CONFIG"
            await self.send_error(code, str(exc))
            return

        self.session = TableSession(tournament)
        self.session.add_listener(self._send_snapshot)
        LOGGER.info("Table opened for %s (%s seats)", hello.get("name") or "anonymous", config.seats)
        await self.send_json("welcome", {"seat": config.human_seat, "config": _config_payload(config)})
        await self._send_snapshot(await self.session.snapshot())

        try:
            async for raw in self.websocket:
                await self.handle_message(_decode(raw))
        except websockets.ConnectionClosed:
            pass
        finally:
            self.session.close()
            LOGGER.info("Table closed")

    def _config_from_hello(self, hello: Dict[str, Any]) -> TableConfig:
        overrides: Dict[str, Any] = {}
        for key in ("seats", "starting_stack"):
            if key in hello:
                value = hello[key]
                if not isinstance(value, int) or isinstance(value, bool):
                    raise HostServerError("BAD_SCHEMA", f"{key} must be an integer")
                overrides[key] = value
        config = replace(self.base_config, **overrides)
        if config.human_seat is None:
            config = replace(config, human_seat=0)
        config.validate()
        return config

    async def handle_message(self, message: Dict[str, Any]) -> None:
        assert self.session is not None
        msg_type = message.get("type")
        try:
            if msg_type == "start_hand":
                await self.session.start_hand()
            elif msg_type == "action":
                human_seat = self.session.tournament.config.human_seat
                assert human_seat is not None
                await self.session.submit_action(human_seat, message.get("action"), message.get("amount"))
            elif msg_type == "snapshot":
                await self._send_snapshot(await self.session.snapshot())
            else:
                await self.send_error("UNKNOWN_TYPE", "Unsupported message type")
        except IllegalAction as exc:
            await self.send_error(exc.code, exc.msg)

    async def _send_snapshot(self, snapshot: TableSnapshot) -> None:
        await self.send_json("snapshot", snapshot.to_dict())
        if snapshot.tournament_over:
            await self.send_json("tournament_end", {"champion": snapshot.champion})

    async def send_json(self, msg_type: str, payload: Dict[str, Any]) -> None:
        try:
            await self.websocket.send(_envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def send_error(self, code: str, msg: str) -> None:
        await self.send_json("error", {"code": code, "msg": msg})

    async def _read_message(self) -> Optional[Dict[str, Any]]:
        try:
            raw = await asyncio.wait_for(self.websocket.recv(), timeout=10)
        except (asyncio.TimeoutError, websockets.ConnectionClosed):
            return None
        return _decode(raw)


async def handle_connection(
    websocket: websockets.ServerConnection,
    config: TableConfig,
    policy: Optional[DecisionPolicy] = None,
) -> None:
    connection = TableConnection(websocket, config, policy)
    try:
        await connection.run()
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Table session crashed: %s", exc)


async def run_server(host: str, port: int, config: TableConfig) -> None:
    config.validate()

    async def _handler(ws):
        await handle_connection(ws, config)

    async with websockets.serve(_handler, host, port):
        LOGGER.info("Hold'em host listening on %s:%s", host, port)
        await asyncio.Future()
