import logging

import click
from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate

from .config import Config
from .errors import register_error_handlers
from .models import db

# Configure logging
logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)
app.config.from_object(Config)
CORS(app, resources={r"/api/*": {
    "origins": app.config["FRONTEND_URL"],
    "methods": ["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    "allow_headers": ["Content-Type", "Authorization"],
}})
db.init_app(app)
migrate = Migrate(app, db)
register_error_handlers(app, db)

# Create database tables
with app.app_context():
    db.create_all()

from . import dashboard, habits, journal, projects, tasks  # noqa: E402,F401


@app.route("/api/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"}), 200


@app.cli.command("issue-token")
@click.argument("external_id")
@click.argument("email")
@click.option("--hours", default=1, show_default=True, help="Token lifetime in hours.")
def issue_token(external_id, email, hours):
    """Print a bearer token for local development."""
    from datetime import timedelta

    from .auth import generate_token

    click.echo(generate_token(external_id, email, expires_in=timedelta(hours=hours)))
