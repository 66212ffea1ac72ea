"""Show domain services: the turn/phase timer state and its command layer.

GameState is pure state plus transitions, GameController adds preconditions
and change notifications, and timers drives the periodic tick. Transport
concerns (HTTP, Socket.IO) live outside this package.
"""

import threading

from .controller import GameController
from .errors import InvalidState, NotFound, ShowError, ValidationFailure
from .state import GameState


class LiveShow:
    """The controller for one live show plus the lock serializing access to it."""

    def __init__(self, controller: GameController):
        self.controller = controller
        self.lock = threading.Lock()


__all__ = [
    'GameController',
    'GameState',
    'InvalidState',
    'LiveShow',
    'NotFound',
    'ShowError',
    'ValidationFailure',
]
