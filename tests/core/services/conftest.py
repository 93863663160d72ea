import pytest

from aether_builder.core.models import collect_tree_problems


@pytest.fixture
def assert_sound():
    """Assert the tree keeps unique ids and single ownership."""
    def check(context):
        assert collect_tree_problems(context.root) == []
    return check


@pytest.fixture
def child_ids():
    def ids(context, node_id):
        return [c.id for c in context.find_node(node_id).children]
    return ids
