def start_show_timers(app, socketio) -> bool:
    """Start the tick and heartbeat background tasks for the app's live show.

    - No-ops in TESTING mode unless ENABLE_TIMERS_IN_TESTS is set
    - Ensures a single pair of tasks per app
    - Every iteration runs under the app's show lock so ticks never overlap
      an operator command

    Returns True when the tasks were started by this call.
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_TIMERS_IN_TESTS'):
        return False
    if app.extensions.get('spectrum_timers'):
        app.logger.info("[timer-skip] show timers already running")
        return False
    app.extensions['spectrum_timers'] = True

    tick_sec = max(1, int(app.config.get('TICK_INTERVAL_MS', 10))) / 1000.0
    heartbeat_sec = float(app.config.get('HEARTBEAT_INTERVAL_SEC', 1.0))

    def _tick_worker():
        while True:
            socketio.sleep(tick_sec)
            run_tick(app)

    def _heartbeat_worker():
        while True:
            socketio.sleep(heartbeat_sec)
            run_heartbeat(app)

    app.logger.info(f"[timer-start] tick={tick_sec}s heartbeat={heartbeat_sec}s")
    socketio.start_background_task(_tick_worker)
    if heartbeat_sec > 0:
        socketio.start_background_task(_heartbeat_worker)
    return True


def run_tick(app) -> None:
    """One tick: advance the show if the active phase has expired."""
    show = app.extensions['spectrum']
    try:
        with show.lock:
            show.controller.tick()
    except Exception:
        # Keep polling; a bad tick must not stop the show clock
        app.logger.exception("[timer-tick] tick failed")


def run_heartbeat(app) -> None:
    show = app.extensions['spectrum']
    try:
        with show.lock:
            show.controller.emit_heartbeat()
    except Exception:
        app.logger.exception("[timer-heartbeat] heartbeat failed")
