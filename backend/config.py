import os


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///dart_counter.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Deferred task timers (seconds)
    LEG_ADVANCE_DELAY_SEC = float(os.environ.get('LEG_ADVANCE_DELAY_SEC', '4'))
    BOT_DELAY_SEC = float(os.environ.get('BOT_DELAY_SEC', '1.5'))
    BOT_DELAY_JITTER_SEC = float(os.environ.get('BOT_DELAY_JITTER_SEC', '0.5'))
    # Undo depth
    HISTORY_LIMIT = int(os.environ.get('HISTORY_LIMIT', '50'))
    # Count the darts of a bust on a finishable score as missed doubles
    BUST_COUNTS_DOUBLE_ATTEMPTS = _env_bool('BUST_COUNTS_DOUBLE_ATTEMPTS', True)
    # Checkout percentage reported before any double was thrown
    DEFAULT_CHECKOUT_PERCENT = float(os.environ.get('DEFAULT_CHECKOUT_PERCENT', '0'))
