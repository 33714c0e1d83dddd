"""
Consistent hashing ring with one position per node.
"""

from .errors import NodeNotFound, RingEmpty, RingError
from .ring import DEFAULT_HASH_SPACE, FULL_HASH_SPACE, Node, Ring, hash_key

__all__ = [
    "DEFAULT_HASH_SPACE",
    "FULL_HASH_SPACE",
    "Node",
    "NodeNotFound",
    "Ring",
    "RingEmpty",
    "RingError",
    "hash_key",
]
