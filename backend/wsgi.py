# backend/wsgi.py
from offline_stock import create_app

app = create_app()
