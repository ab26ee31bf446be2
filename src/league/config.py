"""
Settings and logging setup for the league engine.
"""
import logging
import os

import yaml

BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = os.environ.get('LEAGUE_DATA_DIR', os.path.join(BASE_DIR, 'data'))
SETTINGS_FILENAME = 'settings.yaml'

logger = logging.getLogger(__name__)


def get_default_settings():
    """Return default settings."""
    return {
        'propagation_passes': 8,
        'derive_forward_refs': True,
        'section_labels': {
            'winners': 'Winners Bracket',
            'losers': 'Losers Bracket',
            'championship': 'Championship',
        },
        'log_level': 'INFO',
    }


def load_settings(data_dir: str = None) -> dict:
    """Load settings.yaml from the data directory, merged over the defaults."""
    defaults = get_default_settings()
    path = os.path.join(data_dir or DATA_DIR, SETTINGS_FILENAME)
    if not os.path.exists(path):
        return defaults
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning(f'Failed to parse {path}: {e}')
        return defaults
    if not data or not isinstance(data, dict):
        return defaults

    for key, value in defaults.items():
        if key not in data:
            data[key] = value
        elif isinstance(value, dict) and isinstance(data[key], dict):
            data[key] = {**value, **data[key]}

    try:
        data['propagation_passes'] = int(data['propagation_passes'])
    except (TypeError, ValueError):
        logger.warning(f"Invalid propagation_passes {data['propagation_passes']!r} in {path}, "
                       f"using {defaults['propagation_passes']}")
        data['propagation_passes'] = defaults['propagation_passes']
    return data


def configure_logging(level: str = 'INFO'):
    """Configure root logging once for scripts and the web app."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
