# utils.py
"""
Configuration and logging bootstrap for the renderer.

`load_config` reads `config.json` and checks that the sections the entry
point cannot run without are present. `dataset_path` and `pipeline_params`
turn the "dataset" and "appearance" sections into the arguments the
pipeline takes, so `main.py` never indexes raw config keys itself.
`setup_logging` installs the console and rotating file handlers.
"""
import logging
import logging.handlers
import json
import os
from typing import Any, Dict

# Sections main.py reads without a fallback.
REQUIRED_SECTIONS = ('dataset', 'visualization')
DEFAULT_LOG_FILE = 'logs/renderer.log'
DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
# Rotate at 1 MB, keep 5 old logs.
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 5

# --- Data Contracts ---
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: the parsed JSON object. Every name in REQUIRED_SECTIONS maps
#     to an object, and "dataset" has a string "path".
#   - Raises: FileNotFoundError, json.JSONDecodeError (logged first);
#     ValueError for a missing or malformed required section.
#
# dataset_path(config: Dict[str, Any]) -> str:
#   - Outputs: the dataset file path from the "dataset" section.
#
# pipeline_params(config: Dict[str, Any]) -> Dict[str, Any]:
#   - Outputs: "particle_size" and "color_mode" from "appearance",
#     "delimiter" and "seed" from "dataset". Keys whose value is missing or
#     null are left out, so the pipeline falls back to its defaults.
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs: config with an optional "logging" section ("level", "format",
#     "log_file").
#   - Side Effects: Replaces the root logger's handlers with a console
#     handler and a rotating file handler. Creates the log directory.


def _config_error(msg: str) -> ValueError:
    logging.critical(msg)
    return ValueError(msg)


def load_config(path: str) -> Dict[str, Any]:
    """
    Loads the JSON configuration file and checks its required sections.
    """
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise

    if not isinstance(config, dict):
        raise _config_error(f"Configuration error: {path} must hold a JSON object.")
    for section in REQUIRED_SECTIONS:
        if not isinstance(config.get(section), dict):
            raise _config_error(f"Configuration error: '{section}' section is missing from {path}.")
    if not isinstance(config['dataset'].get('path'), str):
        raise _config_error(f"Configuration error: 'dataset.path' must be a file path in {path}.")

    logging.info("Configuration loaded successfully.")
    return config


def dataset_path(config: Dict[str, Any]) -> str:
    return config['dataset']['path']


def pipeline_params(config: Dict[str, Any]) -> Dict[str, Any]:
    dataset_section = config.get('dataset', {})
    appearance = config.get('appearance', {})
    params = {
        'particle_size': appearance.get('particle_size'),
        'color_mode': appearance.get('color_mode'),
        'delimiter': dataset_section.get('delimiter'),
        'seed': dataset_section.get('seed'),
    }
    return {key: value for key, value in params.items() if value is not None}


def setup_logging(config: Dict[str, Any]) -> None:
    """Configures the root logger from the "logging" section."""
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_file_path = log_config.get('log_file', DEFAULT_LOG_FILE)

    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(log_level)
    # A reload of the config must not stack handlers.
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config.get('format', DEFAULT_LOG_FORMAT))
    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT
        ),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logging.info(f"Logging initialized at {log_level}, writing to {log_file_path}.")
