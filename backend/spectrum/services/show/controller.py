import logging
import math
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple

from spectrum.models import MAX_TERROR, Heartbeat, Phase, Turn
from .errors import InvalidState, ValidationFailure
from .state import GameState

logger = logging.getLogger(__name__)

HEARTBEAT = 'heartbeat'
TURN_CHANGE = 'turnChange'
PHASE_CHANGE = 'phaseChange'
GAME_OVER = 'gameOver'
PHASE_EDIT = 'phaseEdit'
TURN_EDIT = 'turnEdit'
TURN_ORDER_EDIT = 'turnOrderEdit'

EVENTS = (HEARTBEAT, TURN_CHANGE, PHASE_CHANGE, GAME_OVER, PHASE_EDIT, TURN_EDIT, TURN_ORDER_EDIT)

BUMP_DIRECTIONS = ('up', 'down')

Listener = Callable[..., None]


class GameController:
    """Operator command surface over a GameState.

    Checks lifecycle preconditions, applies the command and notifies
    listeners. For a single command, ``turnChange`` and ``phaseChange`` are
    always emitted before the accompanying ``heartbeat``.

    Not thread safe: callers must serialize commands and ``tick``.
    """

    def __init__(self, game: GameState):
        self.game = game
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    # ---- Notifications ----

    def subscribe(self, event: str, listener: Listener) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown event {event!r}")
        self._listeners[event].append(listener)

    def unsubscribe(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, ())):
            try:
                listener(*args)
            except Exception:
                logger.exception(f"[emit-failed] event={event} listener={listener!r}")

    def get_heartbeat(self) -> Heartbeat:
        return self.game.get_heartbeat()

    def emit_heartbeat(self) -> None:
        self.emit(HEARTBEAT, self.game.get_heartbeat().to_dict())

    # ---- Game lifecycle ----

    def new_game(self, game: GameState) -> None:
        self.game = game
        logger.info(f"[new-game] turns={len(game.turn_order)}")
        self.emit_heartbeat()

    def get_save_game(self) -> Dict[str, Any]:
        return self.game.to_dict()

    def start_game(self) -> None:
        if self.game.over:
            raise InvalidState("Can't restart an ended game")
        if self.game.is_running():
            raise InvalidState("Cannot start already running game")

        self.game.start_game()
        self._emit_turn_change()
        self.emit_heartbeat()

    def pause(self) -> None:
        self._check_running()
        if self.game.paused is not None:
            raise InvalidState("Game is already paused")

        self.game.pause()
        self.emit_heartbeat()

    def unpause(self) -> None:
        self._check_running()
        if self.game.paused is None:
            raise InvalidState("Game is not paused")

        self.game.unpause()

        # An edit made while paused may already have used up the time left
        if self.game.is_current_phase_over():
            self._next_phase()
        else:
            self.emit_heartbeat()

    def tick(self) -> None:
        """Advance the show if the active phase has run out.

        This is the only place expiry is detected; it is meant to be polled on
        a short fixed cadence.
        """
        if self.game.is_running() and self.game.is_current_phase_over():
            self._next_phase()

    # ---- Terror ----

    def set_terror(self, terror: int) -> None:
        self._check_running()
        self.game.set_terror(terror)

        if terror == MAX_TERROR:
            self._end_game()
        else:
            self.emit_heartbeat()

    def add_terror(self, amount: int) -> None:
        self._check_running()
        self.set_terror(self.game.terror + amount)

    # ---- Authoring ----

    def new_phase(self, turn_id: str, label: str, length: Optional[int]) -> Tuple[Turn, Phase]:
        self._check_not_over()
        _check_phase_config(label, length)
        turn = self.game.get_turn(turn_id)

        phase = self.game.get_phase(self.game.create_phase(label, length))
        turn.phases.append(phase.id)
        logger.info(f"[phase-new] turn={turn.id} phase={phase.id} label={label!r} length={length}")

        self.emit(PHASE_EDIT, phase.to_dict())
        self.emit(TURN_EDIT, turn.to_dict())
        return turn, phase

    def edit_phase(self, phase_id: str, label: str, length: Optional[int]) -> Phase:
        self._check_not_over()
        _check_phase_config(label, length)

        current_changed = self.game.edit_phase(phase_id, label, length)
        phase = self.game.get_phase(phase_id)
        self.emit(PHASE_EDIT, phase.to_dict())

        if current_changed:
            # A shorter length may mean the live phase is already over
            if self.game.is_current_phase_over():
                self._next_phase()
            else:
                self.emit_heartbeat()

        return phase

    def reorder_turn_phases(self, turn_id: str, phases: List[str]) -> Turn:
        self._check_not_over()
        turn = self.game.get_turn(turn_id)

        if len(phases) != len(turn.phases) or set(phases) != set(turn.phases):
            raise ValidationFailure("Provided phases don't match existing phases")

        turn = self.game.reorder_turn_phases(turn_id, phases)
        self.emit(TURN_EDIT, turn.to_dict())
        return turn

    def bump_phase(self, phase_id: str, direction: str) -> Turn:
        self._check_not_over()
        if direction not in BUMP_DIRECTIONS:
            raise ValidationFailure(f"Invalid direction {direction!r}")

        turn = self.game.bump_phase(phase_id, direction)
        self.emit(TURN_EDIT, turn.to_dict())
        return turn

    def new_turn(self) -> Tuple[Turn, List[Phase]]:
        self._check_not_over()
        game = self.game

        turn_id = game.create_turn(len(game.turn_order) + 1)
        game.turn_order.append(turn_id)

        turn = game.get_turn(turn_id)
        phases = [game.get_phase(pid) for pid in turn.phases]
        logger.info(f"[turn-new] turn={turn.id} label={turn.label}")

        self.emit(TURN_ORDER_EDIT, list(game.turn_order))
        return turn, phases

    # ---- Manual navigation ----

    def advance_turn(self) -> None:
        self._check_running()
        self._next_turn()

    def set_turn(self, turn_id: str) -> None:
        """Jump to a turn, restarting it from its first phase."""
        self._check_running()
        self.game.set_turn(turn_id)
        self._emit_turn_change()
        self.emit_heartbeat()

    def advance_phase(self) -> None:
        self._check_running()
        self._next_phase()

    def set_phase(self, phase_id: str) -> None:
        self._check_running()
        game = self.game

        current_turn = game.get_current_turn()
        target_turn = game.get_turn_by_phase(phase_id)

        if current_turn.id == target_turn.id:
            game.set_phase(phase_id)
            self._emit_phase_change()
        else:
            game.set_turn(target_turn.id, phase_id)
            self._emit_turn_change()
        self.emit_heartbeat()

    # ---- Helpers ----

    def _check_not_over(self) -> None:
        if self.game.over:
            raise InvalidState("Game over man, game over!")

    def _check_running(self) -> None:
        self._check_not_over()
        if not self.game.is_running():
            raise InvalidState("Game is not running")

    def _end_game(self) -> None:
        self.game.end_game()
        self.emit(GAME_OVER)
        self.emit_heartbeat()

    def _emit_turn_change(self) -> None:
        self.emit(TURN_CHANGE, self.game.get_current_turn().id)
        self._emit_phase_change()

    def _emit_phase_change(self) -> None:
        self.emit(PHASE_CHANGE, self.game.get_current_phase().to_dict())

    def _next_turn(self) -> None:
        next_turn_id = self.game.get_next_turn()
        if next_turn_id is None:
            self._end_game()
            return

        self.game.set_turn(next_turn_id)
        self._emit_turn_change()
        self.emit_heartbeat()

    def _next_phase(self) -> None:
        next_phase_id = self.game.get_next_phase()
        if next_phase_id is None:
            self._next_turn()
            return

        self.game.set_phase(next_phase_id)
        self._emit_phase_change()
        self.emit_heartbeat()


def _check_phase_config(label: str, length: Optional[int]) -> None:
    if not isinstance(label, str) or not label:
        raise ValidationFailure("Phase label must be a non-empty string")
    if length is not None:
        if isinstance(length, bool) or not isinstance(length, (int, float)) or not math.isfinite(length) or length <= 0:
            raise ValidationFailure("Phase length must be a positive number of milliseconds or null")
