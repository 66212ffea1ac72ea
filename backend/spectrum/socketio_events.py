from flask_socketio import emit
from flask import current_app
from spectrum import socketio
from spectrum.services.show.controller import EVENTS, GameController

NAMESPACE = '/socket'


def handle_connect(auth=None):
    current_app.logger.info("[socket-connect] viewer connected")
    show = current_app.extensions['spectrum']
    with show.lock:
        beat = show.controller.get_heartbeat().to_dict()
    # Greet the new client with what is on screen right now
    emit('heartbeat', beat)


def handle_disconnect(reason=None):
    current_app.logger.info("[socket-disconnect] viewer disconnected")


def handle_ping(data=None):
    emit('pong', data or {})


def forward_show_events(controller: GameController) -> None:
    """Broadcast every controller notification to all clients on the namespace."""
    for event in EVENTS:
        controller.subscribe(event, _forwarder(event))


def _forwarder(event: str):
    def _forward(*args):
        socketio.emit(event, *args, namespace=NAMESPACE)
    return _forward


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the show namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
