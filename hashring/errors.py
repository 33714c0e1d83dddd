"""
Errors raised by the hash ring
"""


class RingError(Exception):
    """Base class for hash ring errors"""


class NodeNotFound(RingError):
    """A node referenced by its literal id is not on the ring"""

    def __init__(self, node_id: str):
        super().__init__(f"Node {node_id!r} not found")
        self.node_id = node_id


class RingEmpty(RingError):
    """Owner lookup on a ring that has no nodes"""

    def __init__(self):
        super().__init__("No nodes in ring")
