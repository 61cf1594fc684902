# API Routes Module
from gradhelper.api.routes import messages

__all__ = [
    "messages",
]
