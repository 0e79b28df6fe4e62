"""
Shared helper functions and utilities.

Logging setup and configuration handling for the quad detector.
"""

import copy
import logging
import os
import json


DEFAULT_CONFIG = {
    # Geometric acceptance of quad candidates
    'search': {
        'min_edge_length': 6.0,  # pixels, applies to edges and diagonals
        'max_aspect_ratio': 32.0,  # longest edge / shortest edge
    },

    # Payload layout
    'decode': {
        'dimension_bits': 6,  # payload cells per side
        'black_border': 1,  # border cells around the payload
    },

    # Search orchestration
    'detector': {
        'workers': 1,  # >1 shards the search across threads
        'deadline_s': None,  # optional wall-clock budget for the search
    },

    # Output
    'output': {
        'draw': True,
        'json_indent': 2,
    },
}


def setup_logging(level=logging.INFO):
    """Set up logging configuration.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized")


def get_config(config_path=None):
    """Load configuration from file or return defaults.

    Sections present in the file update the matching default section.

    Args:
        config_path: Path to configuration file (optional)

    Returns:
        dict: Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                loaded_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logging.warning(f"Failed to load config from {config_path}: {e}")
            return config

        for section, values in loaded_config.items():
            if isinstance(values, dict) and isinstance(config.get(section), dict):
                config[section].update(values)
            else:
                config[section] = values
        logging.info(f"Configuration loaded from {config_path}")
    elif config_path:
        logging.warning(f"Config file not found: {config_path}, using defaults")

    return config


def save_config(config, config_path):
    """Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration file

    Returns:
        bool: True if save successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=4)
        logging.info(f"Configuration saved to {config_path}")
        return True
    except OSError as e:
        logging.error(f"Failed to save config to {config_path}: {e}")
        return False


def validate_config(config):
    """Validate configuration parameters.

    Args:
        config: Configuration dictionary

    Returns:
        bool: True if valid, False otherwise
    """
    for section in ('search', 'decode', 'detector'):
        if section not in config:
            logging.error(f"Missing required config section: {section}")
            return False

    search = config['search']
    if search.get('min_edge_length', 0) < 0:
        logging.error("min_edge_length must not be negative")
        return False
    if search.get('max_aspect_ratio', 0) < 1:
        logging.error("max_aspect_ratio must be at least 1")
        return False

    decode = config['decode']
    if decode.get('dimension_bits', 0) <= 0 or decode.get('black_border', 0) <= 0:
        logging.error("dimension_bits and black_border must be positive")
        return False

    if config['detector'].get('workers', 0) < 1:
        logging.error("workers must be at least 1")
        return False

    logging.debug("Configuration validated successfully")
    return True


def detector_config(config):
    """Flatten the configuration sections into QuadDetector keyword values.

    Args:
        config: Configuration dictionary

    Returns:
        dict: Flat detector configuration
    """
    flat = {}
    for section in ('search', 'decode', 'detector'):
        flat.update(config.get(section, {}))
    return flat
