import os


def _optional_int(name):
    value = os.environ.get(name)
    return int(value) if value not in (None, '') else None


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() not in ('0', 'false', 'no', 'off')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
        ).split(',') if o.strip()
    ]
    # Seed for the simulation RNG; unset means nondeterministic
    SIM_SEED = _optional_int('SIM_SEED')
    # Optional JSON file replacing the built-in event catalog / probabilities
    EVENT_CATALOG_PATH = os.environ.get('EVENT_CATALOG_PATH') or None
    EVENT_COOLDOWN_MS = int(os.environ.get('EVENT_COOLDOWN_MS', '30000'))
    EVENT_NOISE = float(os.environ.get('EVENT_NOISE', '1.0'))
    # Match clock (seconds / probabilities)
    CLOCK_TICK_SEC = float(os.environ.get('CLOCK_TICK_SEC', '60'))
    CLOCK_ADVANCE_PROBABILITY = float(os.environ.get('CLOCK_ADVANCE_PROBABILITY', '0.1'))
    CLOCK_END_PROBABILITY = float(os.environ.get('CLOCK_END_PROBABILITY', '0.3'))
    # Optional: heartbeat interval for clock worker logs (sec). 0 disables.
    CLOCK_HEARTBEAT_SEC = int(os.environ.get('CLOCK_HEARTBEAT_SEC', '0'))
    INITIAL_QUARTER = int(os.environ.get('INITIAL_QUARTER', '2'))
    INITIAL_TIME_REMAINING = os.environ.get('INITIAL_TIME_REMAINING', '8:45')
    SIMULATION_ENABLED = _env_flag('SIMULATION_ENABLED', True)
    # Score reported while simulation is off ("live data" stand-in)
    FALLBACK_SCORE_MIN = int(os.environ.get('FALLBACK_SCORE_MIN', '5'))
    FALLBACK_SCORE_MAX = int(os.environ.get('FALLBACK_SCORE_MAX', '29'))
    # Narrative service
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY') or None
    OPENAI_BASE_URL = os.environ.get('OPENAI_BASE_URL', 'https://api.openai.com/v1')
    NARRATIVE_MODEL = os.environ.get('NARRATIVE_MODEL', 'gpt-3.5-turbo')
    NARRATIVE_TIMEOUT_SEC = int(os.environ.get('NARRATIVE_TIMEOUT_SEC', '8'))
