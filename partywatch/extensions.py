from __future__ import annotations

from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy

from .lib.change_feed import ChangeFeed


# Process-wide handles; components receive them through a Store rather than importing them
db = SQLAlchemy()
socketio = SocketIO()
feed = ChangeFeed()
