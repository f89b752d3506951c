"""Morning Routine Flask Application Factory."""

import json
import os
from typing import Optional

from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

EXTENSION_KEY = "morning_routine"


def load_app_config(data_dir: str) -> dict:
    """Load application config from data/config.json."""
    config_path = os.path.join(data_dir, "config.json")
    default_config = {"database": "morning_routine.db"}

    if not os.path.exists(config_path):
        return default_config

    try:
        with open(config_path, "r") as f:
            return {**default_config, **json.load(f)}
    except (json.JSONDecodeError, IOError):
        return default_config


class AppState:
    """In-process state shared by the routes: the alarm, the active run and onboarding."""

    def __init__(self, alarm_service):
        self.alarm_service = alarm_service
        self.routine_run = None
        self.onboarding = None


def get_state() -> AppState:
    return current_app.extensions[EXTENSION_KEY]


def create_app(config: Optional[dict] = None):
    """Create and configure the Flask application."""
    from alarm import DATA_DIR
    from alarm.scheduler import AlarmService

    app = Flask(__name__)

    # Default configuration
    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-key-change-in-production")

    # Database path - use data/ directory
    # Database name can be set in data/config.json: {"database": "private.db"}
    data_dir = str(DATA_DIR)
    os.makedirs(data_dir, exist_ok=True)

    app_config = load_app_config(data_dir)
    db_path = os.path.join(data_dir, app_config["database"])
    app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["RESTORE_ALARM"] = True
    app.config["ALARM_SERVICE"] = None

    # Override with custom config if provided
    if config:
        app.config.update(config)

    # Initialize extensions
    db.init_app(app)

    alarm_service = app.config["ALARM_SERVICE"] or AlarmService()
    app.extensions[EXTENSION_KEY] = AppState(alarm_service)

    # Register blueprints
    from app.routes import main_bp
    app.register_blueprint(main_bp)

    # Create database tables
    with app.app_context():
        from app import models  # noqa: F401 - registers tables
        db.create_all()

        if app.config["RESTORE_ALARM"]:
            _restore_alarm(alarm_service)

    return app


def _restore_alarm(alarm_service):
    """Re-schedule the persisted alarm after a restart."""
    from app.storage import AlarmStorage, PreferenceStore

    alarm = AlarmStorage(PreferenceStore()).load()
    if alarm is None:
        print("[Alarm] No saved alarm")
        return
    alarm_service.schedule(alarm)
