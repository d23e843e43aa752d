from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
cors = CORS()
migrate = Migrate()

def init_extension(app):
    db.init_app(app)
    # The store selector header must be allowed on cross-origin requests
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        allow_headers=["Authorization", "Content-Type", "X-Store-Slug"],
    )
    migrate.init_app(app, db)
