from wordstack_app.core.extensions import db

from .key_value import KeyValueEntry

__all__ = ["db", "KeyValueEntry"]
