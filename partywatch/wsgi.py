from . import create_app

# WSGI entry point loaded by gunicorn ("partywatch.wsgi:app")
app = create_app()
