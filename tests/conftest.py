"""
Pytest configuration and shared fixtures for hash ring tests
"""

import os
import sys
from unittest.mock import patch

import pytest

# Add the project root to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from hashring import Ring
from gateway.ring_service import RingService


# Positions used by the worked example: nodes a/b/c at 10/500/900
EXAMPLE_POSITIONS = {
    "a": 10,
    "b": 500,
    "c": 900,
    "key-5": 5,
    "key-10": 10,
    "key-300": 300,
    "key-500": 500,
    "key-600": 600,
    "key-900": 900,
    "key-950": 950,
}


@pytest.fixture
def hash_ring():
    """Create a fresh hash ring for testing"""
    return Ring()


@pytest.fixture
def sample_node_ids():
    """Sample node ids for testing"""
    return ["node1", "node2", "node3", "node4", "node5"]


@pytest.fixture
def populated_ring(hash_ring, sample_node_ids):
    """Ring holding the sample nodes"""
    for node_id in sample_node_ids:
        hash_ring.add_node(node_id)
    return hash_ring


@pytest.fixture
def test_keys():
    """Common test keys for consistent distribution testing"""
    return [f"key_{i}" for i in range(500)] + [
        "user:123", "user:456", "user:789",
        "product:abc", "product:def", "product:ghi",
        "order:001", "order:002", "order:003",
        "session:aaa", "session:bbb", "session:ccc"
    ]


@pytest.fixture
def pinned_positions():
    """Pin hash positions to EXAMPLE_POSITIONS"""
    def fake_hash(key, hash_space=1000):
        return EXAMPLE_POSITIONS[key]

    with patch("hashring.ring.hash_key", side_effect=fake_hash) as mock_hash:
        yield mock_hash


@pytest.fixture
def example_ring(pinned_positions):
    """Ring with nodes a (10), b (500) and c (900)"""
    ring = Ring()
    for node_id in ["b", "c", "a"]:
        ring.add_node(node_id)
    return ring


@pytest.fixture
def ring_service():
    """Create a ring service for testing"""
    return RingService(service_id="ring-test", listen_port=0)


@pytest.fixture
def client(ring_service):
    """Flask test client for the ring service"""
    with ring_service.app.test_client() as client:
        yield client


# Pytest configuration
def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location"""
    for item in items:
        if "unit" in str(item.path):
            item.add_marker(pytest.mark.unit)
