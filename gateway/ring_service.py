"""
Ring Service for the Consistent Hashing Ring

Exposes a single in-process hash ring over HTTP: membership admin
(add, remove, inspect nodes) and key routing lookups.
"""

import argparse
import logging
import os
import threading
import time
from typing import List, Optional

from flask import Flask, request, jsonify

from hashring import DEFAULT_HASH_SPACE, FULL_HASH_SPACE, NodeNotFound, Ring, RingEmpty


logger = logging.getLogger(__name__)


def parse_hash_space(value: str) -> int:
    """Parse a hash space setting; 'full' selects the whole CRC-32 range"""
    if value.strip().lower() == "full":
        return FULL_HASH_SPACE
    hash_space = int(value)
    if not 1 <= hash_space <= FULL_HASH_SPACE:
        raise argparse.ArgumentTypeError(f"hash space must be in [1, {FULL_HASH_SPACE}], got {hash_space}")
    return hash_space


class RingService:
    """HTTP front end for one hash ring"""

    def __init__(self, service_id: str, listen_port: int, hash_space: int = DEFAULT_HASH_SPACE,
                 initial_nodes: Optional[List[str]] = None):
        self.service_id = service_id
        self.listen_port = listen_port
        self.hash_space = hash_space

        self.ring = Ring(hash_space=hash_space)
        self.node_lock = threading.RLock()
        for node_id in initial_nodes or []:
            self.ring.add_node(node_id)

        # Flask app for HTTP API
        self.app = Flask(__name__)
        self.setup_routes()

    def setup_routes(self):
        """Setup Flask routes for the ring API"""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint"""
            return jsonify({
                "status": "healthy",
                "service_id": self.service_id,
                "nodes_count": len(self.ring),
                "timestamp": time.time()
            }), 200

        @self.app.route('/ring/status', methods=['GET'])
        def get_ring_status():
            """Get hash ring status"""
            return jsonify({
                "service_id": self.service_id,
                "hash_space": self.ring.hash_space,
                "total_nodes": len(self.ring),
                "nodes": [node.to_dict() for node in self.ring.nodes]
            }), 200

        @self.app.route('/nodes', methods=['POST'])
        def add_node():
            """Register a node on the ring"""
            data = request.get_json(silent=True) or {}
            node_id = data.get('node_id')

            if not node_id or not isinstance(node_id, str):
                return jsonify({"error": "Missing node_id"}), 400

            with self.node_lock:
                found, _ = self.ring.exists(node_id)
                if found:
                    return jsonify({"error": f"Node {node_id} already registered"}), 409

                node = self.ring.add_node(node_id)
            return jsonify({"status": "added", "node": node.to_dict()}), 201

        @self.app.route('/nodes/<node_id>', methods=['GET'])
        def get_node(node_id):
            """Look up a node by id"""
            found, node = self.ring.exists(node_id)
            if not found:
                return jsonify({"error": "Node not found"}), 404
            return jsonify({"node": node.to_dict()}), 200

        @self.app.route('/nodes/<node_id>', methods=['DELETE'])
        def remove_node(node_id):
            """Remove a node from the ring"""
            try:
                self.ring.remove_node(node_id)
            except NodeNotFound as e:
                logger.warning(f"Remove failed: {e}")
                return jsonify({"error": str(e)}), 404
            return jsonify({"status": "removed", "node_id": node_id}), 200

        @self.app.route('/nodes/<node_id>/next', methods=['GET'])
        def get_next_node(node_id):
            """Get the successor of a node on the ring"""
            try:
                next_id = self.ring.get_next(node_id)
            except NodeNotFound as e:
                return jsonify({"error": str(e)}), 404
            return jsonify({"node_id": node_id, "next": next_id}), 200

        @self.app.route('/keys/<key>', methods=['GET'])
        def get_node_for_key(key):
            """Get the node responsible for a given key"""
            try:
                node_id = self.ring.get(key)
            except RingEmpty as e:
                return jsonify({"error": str(e)}), 404
            return jsonify({
                "key": key,
                "hash": self.ring.hash(key),
                "node": node_id
            }), 200

        @self.app.route('/keys/<key>/replicas', methods=['GET'])
        def get_nodes_for_key(key):
            """Get the owner of a key and its successors"""
            try:
                count = int(request.args.get('count', 1))
            except ValueError:
                return jsonify({"error": "count must be an integer"}), 400
            return jsonify({"key": key, "nodes": self.ring.get_nodes(key, count=count)}), 200

        @self.app.route('/keys/lookup', methods=['POST'])
        def lookup_key():
            """Get the owner of a key passed in the body (handles '/' and other special chars)"""
            data = request.get_json(silent=True) or {}
            key = data.get('key')
            count = data.get('count', 1)

            if not isinstance(key, str):
                return jsonify({"error": "Missing key"}), 400
            if not isinstance(count, int) or isinstance(count, bool):
                return jsonify({"error": "count must be an integer"}), 400

            try:
                node_id = self.ring.get(key)
            except RingEmpty as e:
                return jsonify({"error": str(e)}), 404
            return jsonify({
                "key": key,
                "hash": self.ring.hash(key),
                "node": node_id,
                "nodes": self.ring.get_nodes(key, count=count)
            }), 200

        @self.app.route('/admin/clear_nodes', methods=['POST'])
        def clear_nodes():
            """Clear all registered nodes"""
            with self.node_lock:
                cleared_count = len(self.ring)
                self.ring = Ring(hash_space=self.hash_space)
            logger.info(f"Cleared {cleared_count} nodes from ring service {self.service_id}")
            return jsonify({
                "status": "success",
                "cleared_nodes": cleared_count,
                "service_id": self.service_id
            }), 200

    def start(self):
        """Start the ring service"""
        logger.info(f"Starting Ring Service {self.service_id} on port {self.listen_port} "
                    f"(hash space {self.hash_space}, {len(self.ring)} nodes)")
        self.app.run(host='0.0.0.0', port=self.listen_port, threaded=True)


def main(argv: Optional[List[str]] = None):
    """Main function to run the ring service"""
    logging.basicConfig(level=os.getenv('LOG_LEVEL', 'INFO').upper())

    # Environment variables supply the defaults, command line flags override them
    parser = argparse.ArgumentParser(description='Consistent Hashing Ring Service')
    parser.add_argument('--service-id', default=os.getenv('SERVICE_ID', 'ring-service'),
                        help='Service ID')
    parser.add_argument('--port', type=int, default=int(os.getenv('LISTEN_PORT', '8000')),
                        help='HTTP port to listen on')
    # A string default is passed through parse_hash_space by argparse
    parser.add_argument('--hash-space', type=parse_hash_space,
                        default=os.getenv('RING_HASH_SPACE', str(DEFAULT_HASH_SPACE)),
                        help="Ring modulus, or 'full' for the whole CRC-32 range")
    parser.add_argument('--nodes', nargs='*', default=os.getenv('RING_NODES', '').split(),
                        help='Initial node ids')

    args = parser.parse_args(argv)

    service = RingService(
        service_id=args.service_id,
        listen_port=args.port,
        hash_space=args.hash_space,
        initial_nodes=args.nodes
    )

    try:
        service.start()
    except KeyboardInterrupt:
        logger.info("Ring service stopped")


if __name__ == "__main__":
    main()
