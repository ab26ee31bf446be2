"""
Flask web application for league playoffs and standings.
"""
import os

import yaml
from filelock import Timeout
from flask import Flask, jsonify

from league.config import DATA_DIR, configure_logging, load_settings
from league.playoffs import get_playoff_data
from league.standings import get_season_schedule_data
from league.storage import SeasonRepository

app = Flask(__name__)

configure_logging(os.environ.get('LEAGUE_LOG_LEVEL') or load_settings().get('log_level', 'INFO'))

STATUS_CODES = {
    'Invalid season.': 400,
    'Season not found.': 404,
    'Season data is busy, try again.': 503,
}


def _repository() -> SeasonRepository:
    return SeasonRepository(DATA_DIR)


def _respond(payload: dict):
    """JSON response with an HTTP status derived from the payload's status flag."""
    if payload.get('status'):
        return jsonify(payload)
    return jsonify(payload), STATUS_CODES.get(payload.get('message'), 500)


def _error_payload(message: str) -> dict:
    return {'status': False, 'message': message, 'season_label': '', 'divisions': []}


@app.route('/api/health')
def api_health():
    return jsonify({'status': 'ok'})


@app.route('/api/seasons/<int:season_id>/playoffs')
def api_playoffs(season_id):
    """Playoff brackets, sections and champions for every division in a season."""
    try:
        settings = load_settings(DATA_DIR)
        return _respond(get_playoff_data(season_id, _repository(), settings))
    except Timeout:
        app.logger.warning(f'Timed out waiting for season {season_id} data lock')
        return _respond(_error_payload('Season data is busy, try again.'))
    except yaml.YAMLError as e:
        app.logger.error(f'Failed to parse season {season_id}: {e}')
        return _respond(_error_payload('Something went wrong.'))
    except Exception:
        app.logger.exception(f'Error fetching playoff data for season {season_id}')
        return _respond(_error_payload('Something went wrong.'))


@app.route('/api/seasons/<int:season_id>/schedule')
def api_schedule(season_id):
    """Regular season standings and weekly results."""
    try:
        return _respond(get_season_schedule_data(season_id, _repository()))
    except Timeout:
        app.logger.warning(f'Timed out waiting for season {season_id} data lock')
        return _respond(_error_payload('Season data is busy, try again.'))
    except yaml.YAMLError as e:
        app.logger.error(f'Failed to parse season {season_id}: {e}')
        return _respond(_error_payload('Something went wrong.'))
    except Exception:
        app.logger.exception(f'Error fetching schedule data for season {season_id}')
        return _respond(_error_payload('Something went wrong.'))


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
