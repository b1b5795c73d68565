import logging
import time

import click
from flask import Flask, jsonify
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import InternalServerError

from config import Config
from models import db
from routes import health_bp, timeslots_bp, bookings_bp

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(timeslots_bp)
    app.register_blueprint(bookings_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.errorhandler(SQLAlchemyError)
    def _store_error(exc):
        db.session.rollback()
        logger.exception("Store failure: %s", exc)
        return jsonify(error="Internal server error"), 500

    @app.errorhandler(InternalServerError)
    def _internal_error(exc):
        logger.error("Unhandled error: %s", getattr(exc, "original_exception", exc))
        return jsonify(error="Internal server error"), 500

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        return resp

    register_cli(app)

    return app

#-------------------------
from services.reminder_scheduler import dispatch_due_reminders, pending_count
from services.slot_query import purge_past_slots
from utils.audit import log_event
from utils.seed import seed_demo_data

def register_cli(app):
    @app.cli.command("send-reminders")
    @click.option("--loop", is_flag=True, help="Keep polling instead of a single pass.")
    @click.option("--interval", type=int, default=None, help="Seconds between polls.")
    def send_reminders(loop, interval):
        """Send booking reminders that are due."""
        interval = interval or app.config.get("REMINDER_POLL_SECONDS", 60)
        batch = app.config.get("REMINDER_BATCH_SIZE", 100)
        while True:
            counts = dispatch_due_reminders(limit=batch)
            click.echo(
                f"sent={counts['sent']} failed={counts['failed']} "
                f"skipped={counts['skipped']} pending={pending_count()}"
            )
            if not loop:
                break
            time.sleep(interval)

    @app.cli.command("purge-slots")
    def purge_slots():
        """Delete time slots dated before today."""
        removed = purge_past_slots()
        log_event("SLOT_PURGE", entity="timeslot", metadata={"removed": removed})
        click.echo(f"Removed {removed} past slots")

    @app.cli.command("seed-demo")
    @click.option("--days", type=int, default=7)
    def seed_demo(days):
        """Create a demo venue with courts and hourly slots."""
        user, venue, created = seed_demo_data(days=days)
        click.echo(f"user={user.id} venue={venue.id} slots_created={created}")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
