"""
extensions.py — Flask extension singletons.

The SQLAlchemy handle is the one data client of the service. It is created
here with no app attached and bound in the app factory via init_app(app).
Services never import it: routes pass `db.session` into every service call,
so the services stay testable with a mocked session.

    from teamup.app.extensions import db

Do not pass the app object directly to SQLAlchemy() at import time; that
would prevent running tests with a separate test app instance.

Validation schemas (app/schemas/) inherit from marshmallow.Schema directly
and need no extension object, so they can be loaded without an app context.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
