from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from holdem.errors import IllegalAction
from holdem.models import BETTING_STAGES, ActionType, Decision, TableSnapshot
from holdem.tournament import Tournament

LOGGER = logging.getLogger("holdem.host")

SnapshotListener = Callable[[TableSnapshot], Awaitable[None]]

# TableSession is the single writer for one Tournament. Human input and bot
# decisions both go through the same lock, so they never race on whose turn it is.


@dataclass
class PendingBotAction:
    hand_id: str
    seat: int
    decision: Decision
    task: Optional[asyncio.Task] = None


class TableSession:
    def __init__(self, tournament: Tournament, delay_scale: Optional[float] = None) -> None:
        self.tournament = tournament
        self.delay_scale = tournament.config.bot_delay_scale if delay_scale is None else delay_scale
        self.lock = asyncio.Lock()
        self.pending_bot: Optional[PendingBotAction] = None
        self.listeners: List[SnapshotListener] = []
        self._hand_done: Optional[asyncio.Event] = None
        self._failure: Optional[Exception] = None

    def add_listener(self, listener: SnapshotListener) -> None:
        self.listeners.append(listener)

    # Commands --------------------------------------------------------

    async def start_hand(self, seed: Optional[int] = None) -> TableSnapshot:
        async with self.lock:
            snapshot = self.tournament.start_hand(seed=seed)
            self._cancel_pending_bot()
            self._hand_done = asyncio.Event()
        await self._publish(snapshot)
        await self._schedule_bot_turn()
        return snapshot

    async def submit_action(self, seat_idx: int, action: ActionType, amount: Optional[int] = None) -> TableSnapshot:
        """Apply a human intent. IllegalAction propagates with the table unchanged."""
        async with self.lock:
            snapshot = self.tournament.apply_action(seat_idx, action, amount)
        await self._publish(snapshot)
        await self._schedule_bot_turn()
        return snapshot

    async def snapshot(self) -> TableSnapshot:
        async with self.lock:
            return self.tournament.snapshot()

    async def wait_for_hand(self) -> None:
        if self._hand_done is not None:
            await self._hand_done.wait()
        if self._failure is not None:
            raise self._failure

    async def play_tournament(self, max_hands: Optional[int] = None) -> Optional[int]:
        """Deal hands back to back until one seat holds every chip. Returns the champion seat."""
        hands = 0
        while not self.tournament.is_over:
            if max_hands is not None and hands >= max_hands:
                break
            await self.start_hand()
            await self.wait_for_hand()
            hands += 1
        LOGGER.info("Session finished after %s hands; champion=%s", hands, self.tournament.champion)
        return self.tournament.champion

    def close(self) -> None:
        self._cancel_pending_bot()

    # Bot turns -------------------------------------------------------

    async def _schedule_bot_turn(self) -> None:
        async with self.lock:
            engine = self.tournament.engine
            seat_idx = engine.next_actor()
            if seat_idx is None or engine.hand is None:
                self._mark_hand_done()
                return
            if self.pending_bot is not None:
                if not self._is_stale(self.pending_bot):
                    return
                self._cancel_pending_bot()
            if engine.seats[seat_idx].is_human:
                return
            decision = self.tournament.get_decision(seat_idx)
            pending = PendingBotAction(hand_id=engine.hand.hand_id, seat=seat_idx, decision=decision)
            pending.task = asyncio.create_task(self._run_bot_action(pending))
            self.pending_bot = pending

    async def _run_bot_action(self, pending: PendingBotAction) -> None:
        try:
            await self._apply_bot_action(pending)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Bot turn for seat %s crashed: %s", pending.seat, exc)
            self._failure = exc
            if self._hand_done is not None:
                self._hand_done.set()

    async def _apply_bot_action(self, pending: PendingBotAction) -> None:
        # Thinking time is presentation only; cancelled if the hand moves on first.
        await asyncio.sleep(max(pending.decision.delay_ms * self.delay_scale / 1000, 0))

        async with self.lock:
            if self.pending_bot is pending:
                self.pending_bot = None
            if self._is_stale(pending):
                LOGGER.debug("Discarding stale bot action for seat %s in %s", pending.seat, pending.hand_id)
                return
            decision = pending.decision
            try:
                snapshot = self.tournament.apply_action(pending.seat, decision.action, decision.amount)
            except IllegalAction as exc:
                LOGGER.warning("Bot seat %s proposed an illegal %s (%s); using fallback", pending.seat, decision.action, exc.code)
                fallback = self.tournament.fallback_decision(pending.seat)
                snapshot = self.tournament.apply_action(pending.seat, fallback.action, fallback.amount)

        await self._publish(snapshot)
        await self._schedule_bot_turn()

    def _is_stale(self, pending: PendingBotAction) -> bool:
        hand = self.tournament.engine.hand
        return (
            hand is None
            or hand.hand_id != pending.hand_id
            or hand.stage not in BETTING_STAGES
            or hand.current_player != pending.seat
        )

    def _cancel_pending_bot(self) -> None:
        pending = self.pending_bot
        self.pending_bot = None
        if pending and pending.task and not pending.task.done():
            pending.task.cancel()

    def _mark_hand_done(self) -> None:
        self._cancel_pending_bot()
        if self._hand_done is not None:
            self._hand_done.set()

    async def _publish(self, snapshot: TableSnapshot) -> None:
        for listener in list(self.listeners):
            await listener(snapshot)
