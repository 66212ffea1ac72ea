import math

from flask import Blueprint, jsonify, request, current_app
from spectrum.services.show import GameState, ShowError

show = Blueprint('show', __name__)

MAX_REORDER_PHASES = 50


def _live_show():
    return current_app.extensions['spectrum']


def _bad_request(message):
    return jsonify({'error': message}), 400


def _is_id(value):
    return isinstance(value, str) and value != ''


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _phase_config(data):
    """Pull and check ``phaseConfig`` from a request body.

    Returns ``(label, length, error_response)``.
    """
    phase_config = data.get('phaseConfig')
    if not isinstance(phase_config, dict):
        return None, None, _bad_request('Invalid phaseConfig')
    label = phase_config.get('label')
    if not isinstance(label, str) or label == '':
        return None, None, _bad_request('Invalid phaseConfig.label')
    length = phase_config.get('length')
    if not (length is None or (isinstance(length, (int, float)) and not isinstance(length, bool) and math.isfinite(length) and length > 0)):
        current_app.logger.warning(f"[bad-request] invalid phase length {length!r}")
        return None, None, _bad_request('Invalid phaseConfig.length')
    return label, length, None


@show.errorhandler(ShowError)
def handle_show_error(err):
    current_app.logger.warning(f"[rejected] {request.path}: {err.message}")
    return jsonify({'error': err.message}), err.status_code


@show.route('/getSaveGame', methods=['POST'])
def get_save_game():
    live = _live_show()
    with live.lock:
        return jsonify(live.controller.get_save_game())


@show.route('/getPhases', methods=['POST'])
def get_phases():
    live = _live_show()
    with live.lock:
        return jsonify(live.controller.game.get_game_phases())


@show.route('/startGame', methods=['POST'])
def start_game():
    live = _live_show()
    with live.lock:
        live.controller.start_game()
    current_app.logger.info("[start] show started")
    return '', 204


@show.route('/pause', methods=['POST'])
def pause():
    live = _live_show()
    with live.lock:
        live.controller.pause()
    return '', 204


@show.route('/unpause', methods=['POST'])
def unpause():
    live = _live_show()
    with live.lock:
        live.controller.unpause()
    return '', 204


@show.route('/setTerror', methods=['POST'])
def set_terror():
    data = request.get_json(silent=True) or {}
    terror = data.get('terror')
    if not _is_int(terror):
        return _bad_request('Invalid terror')
    live = _live_show()
    with live.lock:
        live.controller.set_terror(terror)
    return '', 204


@show.route('/addTerror', methods=['POST'])
def add_terror():
    data = request.get_json(silent=True) or {}
    amount = data.get('amount')
    if not _is_int(amount):
        return _bad_request('Invalid amount')
    live = _live_show()
    with live.lock:
        live.controller.add_terror(amount)
    return '', 204


@show.route('/newPhase', methods=['POST'])
def new_phase():
    data = request.get_json(silent=True) or {}
    turn_id = data.get('turnID')
    if not _is_id(turn_id):
        return _bad_request('Invalid turnID')
    label, length, error = _phase_config(data)
    if error:
        return error

    live = _live_show()
    with live.lock:
        turn, phase = live.controller.new_phase(turn_id, label, length)
        return jsonify({'turn': turn.to_dict(), 'phase': phase.to_dict()})


@show.route('/editPhase', methods=['POST'])
def edit_phase():
    data = request.get_json(silent=True) or {}
    phase_id = data.get('phaseID')
    if not _is_id(phase_id):
        return _bad_request('Invalid phaseID')
    label, length, error = _phase_config(data)
    if error:
        return error

    live = _live_show()
    with live.lock:
        phase = live.controller.edit_phase(phase_id, label, length)
        return jsonify(phase.to_dict())


@show.route('/reorderTurnPhases', methods=['POST'])
def reorder_turn_phases():
    data = request.get_json(silent=True) or {}
    turn_id = data.get('turnID')
    if not _is_id(turn_id):
        return _bad_request('Invalid turnID')
    phases = data.get('phases')
    if not isinstance(phases, list) or len(phases) > MAX_REORDER_PHASES:
        return _bad_request('Invalid phases')

    live = _live_show()
    with live.lock:
        turn = live.controller.reorder_turn_phases(turn_id, [str(p) for p in phases])
        return jsonify(turn.to_dict())


@show.route('/bumpPhase', methods=['POST'])
def bump_phase():
    data = request.get_json(silent=True) or {}
    phase_id = data.get('phaseID')
    if not _is_id(phase_id):
        return _bad_request('Invalid phaseID')
    direction = data.get('direction')
    if direction not in ('up', 'down'):
        return _bad_request('Invalid direction')

    live = _live_show()
    with live.lock:
        turn = live.controller.bump_phase(phase_id, direction)
        return jsonify(turn.to_dict())


@show.route('/newTurn', methods=['POST'])
def new_turn():
    live = _live_show()
    with live.lock:
        turn, phases = live.controller.new_turn()
        return jsonify({'turn': turn.to_dict(), 'phases': [p.to_dict() for p in phases]})


@show.route('/advanceTurn', methods=['POST'])
def advance_turn():
    live = _live_show()
    with live.lock:
        live.controller.advance_turn()
    return '', 204


@show.route('/setTurn', methods=['POST'])
def set_turn():
    data = request.get_json(silent=True) or {}
    turn_id = data.get('turnID')
    if not _is_id(turn_id):
        return _bad_request('Invalid turnID')
    live = _live_show()
    with live.lock:
        live.controller.set_turn(turn_id)
    return '', 204


@show.route('/advancePhase', methods=['POST'])
def advance_phase():
    live = _live_show()
    with live.lock:
        live.controller.advance_phase()
    return '', 204


@show.route('/setPhase', methods=['POST'])
def set_phase():
    data = request.get_json(silent=True) or {}
    phase_id = data.get('phaseID')
    if not _is_id(phase_id):
        return _bad_request('Invalid phaseID')
    live = _live_show()
    with live.lock:
        live.controller.set_phase(phase_id)
    return '', 204


@show.route('/newGame', methods=['POST'])
def new_game():
    """
    Throws away the running show and replaces it with a freshly seeded game.
    """
    live = _live_show()
    num_turns = int(current_app.config.get('NUM_TURNS', 7))
    with live.lock:
        live.controller.new_game(GameState(num_turns, clock=live.controller.game.clock))
    current_app.logger.info(f"[new-game] turns={num_turns}")
    return '', 204
