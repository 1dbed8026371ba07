from flask_socketio import emit

from dart_counter import current_session
from dart_counter.api.payloads import parse_throw


def handle_connect(auth=None):
    # New clients get the authoritative state straight away
    emit('update', current_session().snapshot())


def handle_start_match(data=None):
    current_session().start_match(data if isinstance(data, dict) else {})


def handle_throw(data=None):
    # Rejected throws are dropped silently; the next broadcast shows the unchanged state
    payload = parse_throw(data)
    current_session().throw(
        payload['points'],
        doubles_missed=payload['doubles_missed'],
        finish_darts=payload['finish_darts'],
        segments=payload['segments'],
    )


def handle_undo(data=None):
    current_session().undo()


def handle_reset(data=None):
    current_session().reset()


def handle_abort_match(data=None):
    current_session().abort_match()


_HANDLERS = {
    'connect': handle_connect,
    'start_match': handle_start_match,
    'throw': handle_throw,
    'undo': handle_undo,
    'reset': handle_reset,
    'abort_match': handle_abort_match,
}


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from dart_counter import socketio

    for event, handler in _HANDLERS.items():
        socketio.on_event(event, handler, namespace='/ws')

    if testing:
        for event, handler in _HANDLERS.items():
            socketio.on_event(event, handler, namespace='/')
