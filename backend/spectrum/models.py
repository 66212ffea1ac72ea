import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

MINUTES = 60 * 1000

# Seeded into every new turn. Lengths in minutes, None means untimed.
DEFAULT_PHASES = [
    ('Team Time', 10),
    ('Action Time', 15),
    ('Diplomacy Time', 10),
    ('Breaking News', 10),
    ('End of Turn', None),
]

MIN_TERROR = 1
MAX_TERROR = 250


@dataclass
class Phase:
    """A phase template. ``length`` is in milliseconds, None when untimed."""
    id: str
    label: str
    length: Optional[int] = None

    def to_dict(self):
        return {
            'id': self.id,
            'label': self.label,
            'length': self.length,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Phase':
        return cls(id=data['id'], label=data['label'], length=data.get('length'))


@dataclass
class Turn:
    id: str
    label: int
    phases: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            'id': self.id,
            'label': self.label,
            'phases': list(self.phases),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Turn':
        return cls(id=data['id'], label=int(data['label']), phases=list(data.get('phases') or []))


@dataclass
class CurrentPhase:
    """The live instance of a phase.

    This is the only place absolute wall-clock values (epoch ms) live. ``ends``
    is ``math.inf`` for an untimed phase.
    """
    id: str
    length: Optional[int]
    started: float
    ends: float

    @property
    def timed(self) -> bool:
        return self.length is not None

    def to_dict(self):
        return {
            'id': self.id,
            'length': self.length,
            'started': self.started,
            'ends': None if math.isinf(self.ends) else self.ends,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CurrentPhase':
        ends = data.get('ends')
        return cls(
            id=data['id'],
            length=data.get('length'),
            started=data['started'],
            ends=math.inf if ends is None else ends,
        )


@dataclass(frozen=True)
class PauseState:
    """Snapshot taken when the show is paused.

    ``time_left`` is the remaining milliseconds of the paused phase, or None
    when the paused phase is untimed and there is nothing to track. It may be
    zero or negative if the pause landed on the phase boundary.
    """
    time_left: Optional[float] = None

    @property
    def timed(self) -> bool:
        return self.time_left is not None

    def to_dict(self):
        # Untimed pauses are written as -1 to keep the established wire format
        return {'timeLeft': self.time_left if self.timed else -1}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], timed: bool = True) -> 'PauseState':
        """Read a pause back. -1 only means untimed when the paused phase has no length."""
        time_left = data.get('timeLeft')
        if time_left is None or (time_left == -1 and not timed):
            return cls(None)
        return cls(time_left)


@dataclass(frozen=True)
class TimerStatus:
    state: str  # hidden, paused, running
    time_left: Optional[float] = None
    end_time: Optional[float] = None

    def to_dict(self):
        if self.state == 'paused':
            return {'state': 'paused', 'timeLeft': self.time_left if self.time_left is not None else -1}
        if self.state == 'running':
            return {'state': 'running', 'endTime': self.end_time}
        return {'state': 'hidden'}


@dataclass(frozen=True)
class Heartbeat:
    turn: int
    phase: str
    timer: TimerStatus
    terror: int

    def to_dict(self):
        return {
            'turn': self.turn,
            'phase': self.phase,
            'timer': self.timer.to_dict(),
            'terror': self.terror,
        }
