# wsgi.py
# Punto de entrada WSGI (gunicorn / waitress-serve): wsgi:app
from crmsync import create_app

app = create_app()
