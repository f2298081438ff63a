"""Authentication strategies for Reddit requests."""
from .base import AuthStrategy
from .basic import BasicAuth
from .bearer import BearerAuth

__all__ = ["AuthStrategy", "BasicAuth", "BearerAuth"]
