"""Shared fixtures for the Aether Builder test suite.

Every test runs against the packaged configuration only: the user override
directory is redirected to an empty temporary folder and the configuration
singleton is reset, so local ``~/.aether_builder`` files never leak in.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from aether_builder.config import ConfigManager
from aether_builder.core.catalog import TemplateCatalog
from aether_builder.core.models import CanvasNode, DocumentContext
from aether_builder.core.services.structure_editing_service import StructureEditingService
from aether_builder.core.store import EditorStore, build_default_context

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point user overrides at an empty folder and drop the cached singleton."""
    user_dir = tmp_path / "user_config"
    user_dir.mkdir()
    monkeypatch.setenv("AETHER_CONFIG_DIR", str(user_dir))
    monkeypatch.setattr(ConfigManager, "_instance", None)
    return user_dir


@pytest.fixture
def config():
    return ConfigManager()


@pytest.fixture
def catalog(config):
    return TemplateCatalog.from_config(config)


@pytest.fixture
def service(catalog):
    return StructureEditingService(catalog=catalog)


@pytest.fixture
def empty_context(config):
    return build_default_context(config.get_editor_config())


@pytest.fixture
def make_node():
    """Factory for nodes with readable ids."""
    def factory(node_id, kind, children=None, **props):
        return CanvasNode(
            id=node_id,
            kind=kind,
            name=node_id,
            properties=dict(props),
            children=list(children or []),
        )
    return factory


@pytest.fixture
def sample_context(make_node):
    """Root with a container (holding a text), a section and a button.

    root
    ├── c1 (container)
    │   └── t1 (text)
    ├── s1 (section)
    └── b1 (button)
    """
    root = make_node(
        "root",
        "container",
        [
            make_node("c1", "container", [make_node("t1", "text", content="Hello")]),
            make_node("s1", "section"),
            make_node("b1", "button", content="Click"),
        ],
    )
    return DocumentContext(root=root)


@pytest.fixture
def store(config):
    return EditorStore(config=config)


@pytest.fixture
def sample_store(sample_context, config):
    return EditorStore(context=sample_context, config=config)
