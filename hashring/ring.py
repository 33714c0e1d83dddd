"""
Consistent Hashing Ring

Each node owns a single position on a circular hash space. A key belongs to
the first node clockwise from the key's own position, so adding or removing
a node only moves the keys in the arc next to it.
"""

import bisect
import logging
import threading
import zlib
from typing import List, Optional, Tuple

from .errors import NodeNotFound, RingEmpty


logger = logging.getLogger(__name__)

DEFAULT_HASH_SPACE = 1000
FULL_HASH_SPACE = 2 ** 32


def hash_key(key: str, hash_space: int = DEFAULT_HASH_SPACE) -> int:
    """Map a key to a position in [0, hash_space) using CRC-32 (IEEE)"""
    return (zlib.crc32(key.encode("utf-8")) & 0xFFFFFFFF) % hash_space


class Node:
    """A named participant on the ring"""

    def __init__(self, node_id: str, hash_space: int = DEFAULT_HASH_SPACE):
        self.id = node_id
        self.hash_id = hash_key(node_id, hash_space)

    def to_dict(self):
        return {
            "node_id": self.id,
            "hash_id": self.hash_id
        }

    def __repr__(self):
        return f"Node(id={self.id!r}, hash_id={self.hash_id})"


class Ring:
    """
    Consistent hash ring with one position per node.

    Nodes are kept sorted by hash_id. Every operation, lookups included, runs
    under a single lock so readers never see a half-applied mutation.
    Node ids are not required to be unique; operations that address a node by
    id act on the first match in ring order.
    """

    def __init__(self, hash_space: int = DEFAULT_HASH_SPACE):
        if (not isinstance(hash_space, int) or isinstance(hash_space, bool)
                or not 1 <= hash_space <= FULL_HASH_SPACE):
            raise ValueError(f"hash_space must be an integer in [1, {FULL_HASH_SPACE}], got {hash_space!r}")

        self.hash_space = hash_space
        self._nodes: List[Node] = []
        self._hash_ids: List[int] = []  # parallel to _nodes, for bisect
        self._lock = threading.RLock()

    def hash(self, key: str) -> int:
        """Position of a key on this ring"""
        return hash_key(key, self.hash_space)

    def _search(self, key: str) -> int:
        """Index of the node responsible for key. Caller holds the lock."""
        index = bisect.bisect_left(self._hash_ids, self.hash(key))
        if index >= len(self._hash_ids):
            # Past the highest node, the arc wraps around to the first one
            return 0
        return index

    def _index_of(self, node_id: str) -> int:
        """Index of the first node with this literal id. Caller holds the lock."""
        for index, node in enumerate(self._nodes):
            if node.id == node_id:
                return index
        raise NodeNotFound(node_id)

    @property
    def nodes(self) -> List[Node]:
        """Snapshot of the nodes in ring order"""
        with self._lock:
            return list(self._nodes)

    def __len__(self):
        with self._lock:
            return len(self._nodes)

    def __contains__(self, node_id):
        return self.exists(node_id)[0]

    def exists(self, node_id: str) -> Tuple[bool, Optional[Node]]:
        """Check whether a node with this literal id is on the ring"""
        with self._lock:
            for node in self._nodes:
                if node.id == node_id:
                    return True, node
        return False, None

    def add_node(self, node_id: str) -> Node:
        """Place a new node on the ring and return it"""
        with self._lock:
            node = Node(node_id, self.hash_space)
            self._nodes.append(node)
            # list.sort is stable: equal positions keep insertion order
            self._nodes.sort(key=lambda n: n.hash_id)
            self._hash_ids = [n.hash_id for n in self._nodes]

        logger.info(f"Added node {node_id} at position {node.hash_id}")
        return node

    def remove_node(self, node_id: str) -> None:
        """Remove a node; its keys pass to its successor"""
        with self._lock:
            index = self._index_of(node_id)
            node = self._nodes.pop(index)
            del self._hash_ids[index]

        logger.info(f"Removed node {node_id} from position {node.hash_id}")

    def get(self, key: str) -> str:
        """Id of the node that owns key"""
        with self._lock:
            if not self._nodes:
                raise RingEmpty()
            node = self._nodes[self._search(key)]

        logger.debug(f"Key {key} -> node {node.id}")
        return node.id

    def get_next(self, node_id: str) -> str:
        """Id of the node that follows node_id in ring order"""
        with self._lock:
            index = self._index_of(node_id)
            return self._nodes[(index + 1) % len(self._nodes)].id

    def get_nodes(self, key: str, count: int = 1) -> List[str]:
        """Owner of key followed by its distinct successors, at most count ids"""
        with self._lock:
            if not self._nodes or count <= 0:
                return []

            start = self._search(key)
            result = []
            seen = set()

            for offset in range(len(self._nodes)):
                node = self._nodes[(start + offset) % len(self._nodes)]
                if node.id not in seen:
                    result.append(node.id)
                    seen.add(node.id)
                    if len(result) >= count:
                        break

            return result
