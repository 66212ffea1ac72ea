import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Turns seeded into a fresh game
    NUM_TURNS = int(os.environ.get('NUM_TURNS', '7'))
    # Expiry polling cadence (ms)
    TICK_INTERVAL_MS = int(os.environ.get('TICK_INTERVAL_MS', '10'))
    # Periodic heartbeat broadcast (sec). 0 disables.
    HEARTBEAT_INTERVAL_SEC = float(os.environ.get('HEARTBEAT_INTERVAL_SEC', '1'))
    PORT = int(os.environ.get('PORT', '8081'))
    # Background timers are off under TESTING unless this is set
    ENABLE_TIMERS_IN_TESTS = False
