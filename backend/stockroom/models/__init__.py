from .auth import User, SessionToken
from .inventory import Product
from .communications import BusinessNews

__all__ = [
    'User', 'SessionToken',
    'Product',
    'BusinessNews',
]
