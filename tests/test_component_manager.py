import pytest

from component_manager import ComponentManager, DisjointSetUnion


def test_chamber_component_updates_to_canonical_root():
    manager = ComponentManager()
    first = manager.register_chamber()
    second = manager.register_chamber()

    manager.connect(second, first)

    assert manager.chamber_component(0) == first
    assert manager.chamber_component(1) == first


def test_connect_rejects_unknown_chambers():
    manager = ComponentManager()
    manager.register_chamber()

    with pytest.raises(IndexError):
        manager.connect(0, 3)


def test_component_summary_and_sizes_merge_members():
    manager = ComponentManager()
    for _ in range(4):
        manager.register_chamber()

    manager.connect(0, 1)
    manager.connect(1, 2)

    assert manager.component_summary() == {0: [0, 1, 2], 3: [3]}
    assert manager.component_sizes() == {0: 3, 3: 1}
    assert manager.total_components() == 2


def test_has_single_component_reflects_connectivity():
    manager = ComponentManager()
    assert manager.has_single_component()

    first = manager.register_chamber()
    second = manager.register_chamber()
    assert not manager.has_single_component()
    assert not manager.connected(first, second)

    manager.connect(first, second)

    assert manager.has_single_component()
    assert manager.connected(first, second)
    assert manager.chamber_count == 2


def test_disjoint_set_keeps_smallest_root_regardless_of_order():
    dsu = DisjointSetUnion()

    dsu.union(9, 4)
    dsu.union(7, 9)
    dsu.union(2, 7)

    assert {dsu.find(item) for item in (2, 4, 7, 9)} == {2}
