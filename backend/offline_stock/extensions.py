# Overview: Flask extension instance for the embedded store.

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
