# config.py

"""
Run Configuration

Loads the JSON run configuration and validates it against config.schema.json
before anything is built from it.

Data Contract:
- The file holds 'run_id', 'master_seed', a 'logging' dictionary with 'level'
  and 'format', and a 'simulation' dictionary.
- Missing or invalid values raise ValueError naming the offending key.
"""

import json
import os

import jsonschema

DEFAULT_LOG_INTERVAL = 100  # Ticks between debug statistics lines
SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.schema.json')

_schema_cache = {}


def load_schema(schema_path=SCHEMA_PATH) -> dict:
    """Reads the JSON schema once per path."""
    if schema_path not in _schema_cache:
        with open(schema_path, 'r') as f:
            _schema_cache[schema_path] = json.load(f)
    return _schema_cache[schema_path]


def _validate(instance: dict, schema: dict, where: str):
    try:
        jsonschema.validate(instance=instance, schema=schema)
    except jsonschema.ValidationError as e:
        path = '.'.join(str(p) for p in e.absolute_path) or '<root>'
        raise ValueError(f"Invalid {where} at '{path}': {e.message}") from e


def validate_simulation_config(sim_config: dict) -> dict:
    """
    Checks the 'simulation' section and returns a copy with defaults filled in.
    """
    _validate(sim_config, load_schema()['properties']['simulation'], 'simulation config')
    validated = dict(sim_config)
    validated.setdefault('log_interval', DEFAULT_LOG_INTERVAL)
    return validated


def load_config(config_path='config.json') -> dict:
    """
    Reads the configuration file and validates every section of it.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)

    _validate(config, load_schema(), f"config file {config_path}")
    config['simulation'] = validate_simulation_config(config['simulation'])
    return config
