from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

allowed_origins = [
    "http://localhost:8080",
    "http://127.0.0.1:8080",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One live show per app
    from spectrum.services.show import GameController, GameState, LiveShow
    controller = GameController(GameState(flask_app.config.get('NUM_TURNS', 7)))
    flask_app.extensions['spectrum'] = LiveShow(controller)

    # Import and register blueprints here
    from spectrum.main import main
    flask_app.register_blueprint(main)

    from spectrum.api.show import show
    flask_app.register_blueprint(show, url_prefix='/api')

    # Register Socket.IO event handlers and forward show notifications to clients
    from spectrum.socketio_events import forward_show_events, register_socketio_handlers
    register_socketio_handlers()
    forward_show_events(controller)

    from spectrum.services.show.timers import start_show_timers
    start_show_timers(flask_app, socketio)

    return flask_app
