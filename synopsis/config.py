"""
Synopsis Configuration Module
Centralized configuration for the summarization engine.
"""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Pick up provider credentials (OPENAI_API_KEY etc.) from a local .env file
load_dotenv()

# Debug Mode Configuration
DEBUG_MODE = os.environ.get('DEBUG', 'false').lower() == 'true'

# Application Paths
APP_NAME = "Synopsis"
APPDATA_DIR = Path(os.environ.get('APPDATA', os.path.expanduser('~/.config'))) / APP_NAME
LOGS_DIR = APPDATA_DIR / "logs"

# Ensure directories exist
for directory in [APPDATA_DIR, LOGS_DIR]:
    directory.mkdir(parents=True, exist_ok=True)

# Logging Configuration
LOG_FILE = LOGS_DIR / "processing.log"
DEBUG_FLOW_FILE = LOGS_DIR / "debug_flow.txt"
LOG_FORMAT = "[%(levelname)s %(asctime)s] %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

# Input Limits
MIN_ARTICLE_LENGTH = 500  # Characters; shorter input is rejected before any backend call

# Token Estimation
# 1 token ≈ 4 characters. The same divisor drives chunk boundaries (max_chars =
# max_tokens * CHARS_PER_TOKEN) and the length planner input, so changing it
# shifts both together.
CHARS_PER_TOKEN = int(os.environ.get('SYNOPSIS_CHARS_PER_TOKEN', '4'))

# Reduction Settings
BUDGET_RATIO = 0.8          # Use 80% of a backend's token budget per call
REDUCTION_GROUP_SIZE = 5    # Summaries combined per group in a reduction round
MAX_REDUCTION_ROUNDS = 5    # Combination rounds before degrading to a multi-part result
MULTI_PART_HEADER = "SUMMARY (Multi-part):"

# Summary Length Targets (tokens)
SUMMARY_LENGTH_RATIO = 0.18   # Aim for 18% of the input length
MIN_LENGTH_RATIO = 0.4        # min_length = floor(0.4 * max_length)
CHUNK_SUMMARY_MAX_LENGTH = 150         # Per-chunk summaries
CHUNK_SUMMARY_MIN_LENGTH = 60
INTERMEDIATE_SUMMARY_MAX_LENGTH = 180  # Grouped summaries in reduction rounds
INTERMEDIATE_SUMMARY_MIN_LENGTH = 70

# Timeouts
SUMMARIZATION_TIMEOUT_SECONDS = 180       # Per backend call (3 minutes)
WORKER_READY_TIMEOUT_SECONDS = 10         # Readiness handshake budget
WORKER_PING_INTERVAL_SECONDS = 0.1        # 100 ms between readiness pings
QUEUE_TIMEOUT_SECONDS = 2.0               # Poll timeout for worker queue reads

# Local Worker Configuration
# "process": model runs in a spawned multiprocessing worker (default)
# "thread":  model runs on a daemon thread inside this process
LOCAL_WORKER_MODE = os.environ.get('SYNOPSIS_WORKER_MODE', 'process').lower()
DEFAULT_LOCAL_MODEL = "sshleifer/distilbart-cnn-6-6"

# Ollama (local REST service)
OLLAMA_API_BASE = "http://localhost:11434"  # Default Ollama API endpoint
OLLAMA_CONTEXT_WINDOW = 2048  # Tokens - matches Ollama's default for CPU performance

# Remote Provider Endpoints
HF_API_BASE = "https://api-inference.huggingface.co"
OPENAI_API_BASE = "https://api.openai.com/v1"
ANTHROPIC_API_BASE = "https://api.anthropic.com/v1"
ANTHROPIC_API_VERSION = "2023-06-01"
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"

# Environment variables holding provider credentials
CREDENTIAL_ENV_VARS = {
    'huggingface': 'HF_API_KEY',
    'openai': 'OPENAI_API_KEY',
    'claude': 'ANTHROPIC_API_KEY',
    'gemini': 'GEMINI_API_KEY',
}

# --- Backend Configuration System ---
BACKEND_CONFIG_FILE = Path(__file__).parent.parent / "config" / "backends.yaml"

# Used when config/backends.yaml is absent (e.g. installed without the repo tree)
DEFAULT_BACKEND_CONFIGS = {
    'local': {'default_model': DEFAULT_LOCAL_MODEL, 'token_budget': 512},
    'ollama': {'default_model': 'gemma3:1b', 'token_budget': OLLAMA_CONTEXT_WINDOW},
    'huggingface': {'default_model': 'facebook/bart-large-cnn', 'token_budget': 1024},
    'openai': {'default_model': 'gpt-4o-mini', 'token_budget': 8000},
    'claude': {'default_model': 'claude-3-5-haiku-latest', 'token_budget': 8000},
    'gemini': {'default_model': 'gemini-2.5-flash', 'token_budget': 8000},
}
DEFAULT_MODEL_CONFIGS = {
    't5-small': {'token_budget': 400},
    't5-base': {'token_budget': 400},
}

BACKEND_CONFIGS = {}
MODEL_CONFIGS = {}


def load_backend_configs(config_file: Path = None):
    """Loads backend and model configurations from config/backends.yaml."""
    global BACKEND_CONFIGS, MODEL_CONFIGS
    config_file = config_file or BACKEND_CONFIG_FILE
    try:
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
        BACKEND_CONFIGS = data.get('backends') or dict(DEFAULT_BACKEND_CONFIGS)
        MODEL_CONFIGS = data.get('models') or {}
        if DEBUG_MODE:
            from synopsis.logging_config import debug_log
            debug_log(f"[Config] Loaded {len(BACKEND_CONFIGS)} backend configurations from {config_file}")
    except FileNotFoundError:
        BACKEND_CONFIGS = dict(DEFAULT_BACKEND_CONFIGS)
        MODEL_CONFIGS = dict(DEFAULT_MODEL_CONFIGS)
    except yaml.YAMLError as e:
        from synopsis.logging_config import error
        error(f"[Config] Failed to parse backend config file {config_file}: {e}")
        BACKEND_CONFIGS = dict(DEFAULT_BACKEND_CONFIGS)
        MODEL_CONFIGS = dict(DEFAULT_MODEL_CONFIGS)


def get_backend_config(backend_kind: str) -> dict:
    """
    Returns the configuration block for a backend kind.

    Args:
        backend_kind: Backend identifier (e.g., 'local', 'openai').

    Returns:
        dict with at least 'default_model' and 'token_budget'.

    Raises:
        ValueError: If the backend kind is not configured.
    """
    if not BACKEND_CONFIGS:
        load_backend_configs()

    config = BACKEND_CONFIGS.get(backend_kind)
    if config is None:
        raise ValueError(
            f"Unknown backend '{backend_kind}'. "
            f"Available: {', '.join(sorted(BACKEND_CONFIGS))}"
        )
    return config


def get_token_budget(backend_kind: str, model: str = None) -> int:
    """
    Returns the max input tokens a backend/model accepts safely in one call.

    Lookup order:
    1. Exact model entry in the models table
    2. Model entry matching the last path segment (e.g. 'google/t5-small' -> 't5-small')
    3. The backend's default budget

    Args:
        backend_kind: Backend identifier (e.g., 'local').
        model: Optional model identifier.

    Returns:
        Token budget as an int.
    """
    backend = get_backend_config(backend_kind)

    if model:
        if model in MODEL_CONFIGS:
            return int(MODEL_CONFIGS[model]['token_budget'])

        short_name = model.rsplit('/', 1)[-1]
        if short_name in MODEL_CONFIGS:
            return int(MODEL_CONFIGS[short_name]['token_budget'])

    return int(backend['token_budget'])


# Load configs on module import
load_backend_configs()
# --- End Backend Configuration System ---
