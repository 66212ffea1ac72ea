"""Turn/phase timer state for a single live show.

GameState holds the whole run-of-show aggregate and the transitions over it.
It performs no I/O and owns no timers: every time computation reads the
injected clock (epoch milliseconds), and expiry is only noticed when someone
asks ``is_current_phase_over``.
"""

import logging
import math
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

from spectrum.models import (
    DEFAULT_PHASES,
    MAX_TERROR,
    MIN_TERROR,
    MINUTES,
    CurrentPhase,
    Heartbeat,
    PauseState,
    Phase,
    TimerStatus,
    Turn,
)
from .errors import InvalidState, NotFound, ValidationFailure

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid.uuid4())


class GameState:
    def __init__(self, num_turns: int = 0, clock: Optional[Clock] = None):
        self.clock: Clock = clock or now_ms
        self.phases: Dict[str, Phase] = {}
        self.turns: Dict[str, Turn] = {}
        self.turn_order: List[str] = []
        self.current_turn: Optional[str] = None
        self.current_phase: Optional[CurrentPhase] = None
        self.terror: int = MIN_TERROR
        self.paused: Optional[PauseState] = None
        self.over: bool = False

        for label in range(1, num_turns + 1):
            self.turn_order.append(self.create_turn(label))

    # ---- Authoring ----

    def create_phase(self, label: str, length: Optional[int]) -> str:
        phase = Phase(id=_new_id(), label=label, length=length)
        self.phases[phase.id] = phase
        return phase.id

    def create_turn(self, label: int) -> str:
        """Create a turn seeded with the default phases.

        The turn is not added to the turn order; callers decide where it goes.
        """
        phase_ids = [
            self.create_phase(name, minutes * MINUTES if minutes else None)
            for name, minutes in DEFAULT_PHASES
        ]
        turn = Turn(id=_new_id(), label=label, phases=phase_ids)
        self.turns[turn.id] = turn
        return turn.id

    def edit_phase(self, phase_id: str, label: str, length: Optional[int]) -> bool:
        """Update a phase template and reconcile the live phase if it is the one edited.

        Elapsed time is preserved: a length change shifts ``ends`` by the
        delta instead of restarting the phase. When paused, the timing is
        recomputed as if momentarily unpaused and then paused again so that
        the stored time left follows the new length.

        Returns True when the live phase was affected.
        """
        phase = self.get_phase(phase_id)
        old_length = phase.length
        phase.label = label
        phase.length = length

        current = self.current_phase
        if current is None or current.id != phase_id:
            return False
        if current.length == length:
            # Label only; the heartbeat reads labels from the template
            return True

        was_paused = self.paused is not None
        if was_paused:
            self._resume_clock()

        if length is None:
            current.ends = math.inf
        elif current.length is None:
            current.ends = current.started + length
        else:
            current.ends += length - current.length
        current.length = length

        if was_paused:
            self.paused = self._pause_snapshot()

        logger.info(f"[phase-edit] phase={phase_id} length {old_length} -> {length} paused={was_paused}")
        return True

    def reorder_turn_phases(self, turn_id: str, phases: List[str]) -> Turn:
        turn = self.get_turn(turn_id)
        turn.phases = list(phases)
        return turn

    def bump_phase(self, phase_id: str, direction: str) -> Turn:
        """Swap a phase with its neighbour. Moving past either end is a no-op."""
        turn = self.get_turn_by_phase(phase_id)
        idx = turn.phases.index(phase_id)
        target = idx - 1 if direction == 'up' else idx + 1
        if target < 0 or target >= len(turn.phases):
            return turn
        turn.phases[idx], turn.phases[target] = turn.phases[target], turn.phases[idx]
        return turn

    # ---- Lookups ----

    def get_phase(self, phase_id: str) -> Phase:
        phase = self.phases.get(phase_id)
        if phase is None:
            raise NotFound(f"Unknown phase {phase_id!r}")
        return phase

    def get_turn(self, turn_id: str) -> Turn:
        turn = self.turns.get(turn_id)
        if turn is None:
            raise NotFound(f"Unknown turn {turn_id!r}")
        return turn

    def get_turn_by_phase(self, phase_id: str) -> Turn:
        self.get_phase(phase_id)
        for turn in self.turns.values():
            if phase_id in turn.phases:
                return turn
        raise NotFound(f"Phase {phase_id!r} does not belong to any turn")

    def get_current_turn(self) -> Turn:
        if self.current_turn is None:
            raise InvalidState("No turn is active")
        return self.get_turn(self.current_turn)

    def get_current_phase(self) -> CurrentPhase:
        if self.current_phase is None:
            raise InvalidState("No phase is active")
        return self.current_phase

    def get_game_phases(self) -> List[Dict[str, str]]:
        return [{'id': p.id, 'label': p.label} for p in self.phases.values()]

    def is_running(self) -> bool:
        return self.current_phase is not None and not self.over

    # ---- Progression ----

    def get_next_phase(self) -> Optional[str]:
        turn = self.get_current_turn()
        if self.current_phase is None:
            return turn.phases[0] if turn.phases else None
        pos = turn.phases.index(self.current_phase.id) + 1
        if pos >= len(turn.phases):
            return None
        return turn.phases[pos]

    def get_next_turn(self) -> Optional[str]:
        if self.current_turn is None:
            return self.turn_order[0] if self.turn_order else None
        pos = self.turn_order.index(self.current_turn) + 1
        if pos >= len(self.turn_order):
            return None
        return self.turn_order[pos]

    def set_phase(self, phase_id: str) -> CurrentPhase:
        phase = self.get_phase(phase_id)
        now = self.clock()
        self.current_phase = CurrentPhase(
            id=phase.id,
            length=phase.length,
            started=now,
            ends=now + phase.length if phase.length else math.inf,
        )
        if self.paused is not None:
            # Whatever is now active is what is paused
            self.paused = PauseState(phase.length if phase.length else None)
        logger.info(f"[phase-change] turn={self.current_turn} phase={phase.id} label={phase.label!r} length={phase.length}")
        return self.current_phase

    def set_turn(self, turn_id: str, phase_id: Optional[str] = None) -> CurrentPhase:
        turn = self.get_turn(turn_id)
        if phase_id is not None and phase_id not in turn.phases:
            raise NotFound(f"Phase {phase_id!r} is not part of turn {turn.label}")
        if phase_id is None:
            if not turn.phases:
                raise InvalidState(f"Turn {turn.label} has no phases")
            phase_id = turn.phases[0]
        self.current_turn = turn.id
        logger.info(f"[turn-change] turn={turn.id} label={turn.label}")
        return self.set_phase(phase_id)

    def start_game(self) -> CurrentPhase:
        if not self.turn_order:
            raise InvalidState("Game has no turns")
        return self.set_turn(self.turn_order[0])

    def end_game(self) -> None:
        self.over = True
        self.current_phase = None
        self.paused = None
        logger.info(f"[game-over] turn={self.current_turn} terror={self.terror}")

    def is_current_phase_over(self) -> bool:
        if self.paused is not None or self.current_phase is None:
            return False
        return self.current_phase.ends < self.clock()

    # ---- Pause accounting ----

    def pause(self) -> PauseState:
        if not self.is_running():
            raise InvalidState("Game is not running")
        if self.paused is not None:
            raise InvalidState("Game is already paused")
        self.paused = self._pause_snapshot()
        logger.info(f"[pause] phase={self.current_phase.id} time_left={self.paused.time_left}")
        return self.paused

    def unpause(self) -> None:
        if not self.is_running():
            raise InvalidState("Game is not running")
        if self.paused is None:
            raise InvalidState("Game is not paused")
        self._resume_clock()
        self.paused = None
        logger.info(f"[unpause] phase={self.current_phase.id} ends={self.current_phase.ends}")

    def _pause_snapshot(self) -> PauseState:
        current = self.current_phase
        if not current.timed:
            return PauseState(None)
        return PauseState(current.ends - self.clock())

    def _resume_clock(self) -> None:
        # Rebuild started/ends as if the phase had run continuously up to now
        current = self.current_phase
        pause = self.paused
        if not pause.timed or not current.timed:
            return
        now = self.clock()
        current.started = now - (current.length - pause.time_left)
        current.ends = now + pause.time_left

    # ---- Terror ----

    def set_terror(self, terror: int) -> None:
        if not self.is_running():
            raise InvalidState("Game is not running")
        if terror < MIN_TERROR or terror > MAX_TERROR:
            raise ValidationFailure(f"Terror must be between {MIN_TERROR} and {MAX_TERROR}, got {terror}")
        self.terror = terror

    # ---- Projection ----

    def get_heartbeat(self) -> Heartbeat:
        if not self.is_running():
            return Heartbeat(turn=0, phase='', timer=TimerStatus('hidden'), terror=self.terror)

        turn = self.turns.get(self.current_turn)
        phase = self.phases.get(self.current_phase.id)
        return Heartbeat(
            turn=turn.label if turn else 0,
            phase=phase.label if phase else '',
            timer=self._timer_status(),
            terror=self.terror,
        )

    def _timer_status(self) -> TimerStatus:
        if self.paused is not None:
            return TimerStatus('paused', time_left=self.paused.time_left)
        if not self.current_phase.timed:
            return TimerStatus('hidden')
        return TimerStatus('running', end_time=self.current_phase.ends)

    # ---- Snapshot ----

    def to_dict(self) -> Dict[str, Any]:
        return {
            'phases': {pid: p.to_dict() for pid, p in self.phases.items()},
            'turns': {tid: t.to_dict() for tid, t in self.turns.items()},
            'turnOrder': list(self.turn_order),
            'currentTurn': self.current_turn,
            'currentPhase': self.current_phase.to_dict() if self.current_phase else None,
            'terror': self.terror,
            'paused': self.paused.to_dict() if self.paused else False,
            'over': self.over,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], clock: Optional[Clock] = None) -> 'GameState':
        """Rebuild a state from a snapshot verbatim.

        Absolute timestamps in ``currentPhase`` are restored as saved; they are
        not reconciled against the time that passed since the snapshot.
        """
        state = cls(clock=clock)
        state.phases = {pid: Phase.from_dict(p) for pid, p in (data.get('phases') or {}).items()}
        state.turns = {tid: Turn.from_dict(t) for tid, t in (data.get('turns') or {}).items()}
        state.turn_order = list(data.get('turnOrder') or [])
        state.current_turn = data.get('currentTurn')
        current = data.get('currentPhase')
        state.current_phase = CurrentPhase.from_dict(current) if current else None
        state.terror = int(data.get('terror', MIN_TERROR))
        paused = data.get('paused')
        if paused:
            timed = state.current_phase is not None and state.current_phase.timed
            state.paused = PauseState.from_dict(paused, timed=timed)
        else:
            state.paused = None
        state.over = bool(data.get('over', False))
        return state
