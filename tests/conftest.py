"""
Shared fixtures for the ArchCanvas test suite.
"""

import sys
from pathlib import Path

import pytest

# Add project source to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from archcanvas.shared import Settings, get_metrics
from archcanvas.services.editor import InteractionController
from archcanvas.services.graph_model import GraphModel
from archcanvas.services.persistence import InMemoryArchitectureStore, PersistenceManager
from archcanvas.services.taxonomy import get_taxonomy


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment and any local .env file."""
    return Settings(_env_file=None, storage_backend="memory", data_dir=tmp_path / "architectures")


@pytest.fixture(autouse=True)
def reset_metrics():
    get_metrics().reset()
    yield
    get_metrics().reset()


@pytest.fixture
def taxonomy():
    return get_taxonomy()


@pytest.fixture
def graph(taxonomy):
    return GraphModel(taxonomy)


@pytest.fixture
def controller(settings, graph):
    return InteractionController(graph=graph, settings=settings)


@pytest.fixture
def store():
    return InMemoryArchitectureStore()


@pytest.fixture
def manager(store, settings):
    return PersistenceManager(store=store, settings=settings)


def place(controller, provider, resource_type, position=(0, 0)):
    """Drag a catalog item onto the canvas and return the new node."""
    controller.catalog_drag_start({"provider": provider, "resource_type": resource_type})
    result = controller.drop_on_canvas(position)
    assert result.accepted, result.notice
    return result.node


def connect(controller, source_id, target_id, kind="network"):
    """Drag from a node handle onto another node."""
    controller.pointer_down_on_node_handle(source_id)
    return controller.pointer_up_on_node(target_id, kind)
