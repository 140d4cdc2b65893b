# Overview: Flask-SQLAlchemy and Flask-Migrate instances shared by the stockroom models, SQL store and migrations.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()
