import pytest

from shuimo.world.bounds import Viewport
from shuimo.world.chunk_manager import ChunkManager, GeneratedRange


@pytest.fixture
def manager(generator):
    return ChunkManager(generator, 512, 800, 10, 12345)


def test_accessors(manager):
    assert manager.get_chunk_width() == 512
    assert manager.get_base_seed() == 12345
    assert manager.chunk_width == 512
    assert manager.viewport_height == 800
    assert manager.max_cached_chunks == 10


def test_default_seed_is_fixed_for_lifetime(generator):
    m = ChunkManager(generator)
    seed = m.base_seed
    m.get_chunk(3)
    assert m.get_chunk(3).seed == seed + 3
    assert m.base_seed == seed


@pytest.mark.parametrize("kwargs", [
    dict(chunk_width=0),
    dict(chunk_width=-512),
    dict(viewport_height=0),
    dict(max_cached_chunks=0),
])
def test_invalid_configuration_raises(generator, kwargs):
    with pytest.raises(ValueError):
        ChunkManager(generator, **kwargs)


def test_generates_on_demand(manager, generator):
    chunk0 = manager.get_chunk(0)
    assert chunk0.index == 0 and chunk0.x == 0 and len(chunk0.elements) == 3

    chunk1 = manager.get_chunk(1)
    assert chunk1.index == 1 and chunk1.x == 512 and chunk1.seed == 12346
    assert generator.calls == [(0, 12345), (512, 12346)]


def test_same_instance_for_same_index(manager, generator):
    assert manager.get_chunk(0) is manager.get_chunk(0)
    assert len(generator.calls) == 1


def test_negative_indices(manager, generator):
    chunk = manager.get_chunk(-2)
    assert chunk.x == -1024
    assert chunk.seed == 12343
    assert chunk.id == "chunk--2-12343"
    assert generator.calls == [(-1024, 12343)]


def test_regeneration_receives_same_arguments(generator):
    m = ChunkManager(generator, 512, 800, 1, 12345)
    m.get_chunk(4)
    m.get_chunk(5)  # evicts 4
    assert not m.has_chunk(4)
    m.get_chunk(4)
    assert generator.calls[0] == generator.calls[2] == (2048, 12349)


def test_generated_range_widens(manager):
    assert manager.get_state().generated_range == GeneratedRange(0, 0)
    manager.get_chunk(2)
    assert manager.get_state().generated_range == GeneratedRange(0, 1536)
    manager.get_chunk(-1)
    assert manager.get_state().generated_range == GeneratedRange(-512, 1536)


def test_scenario_lru_eviction(generator):
    m = ChunkManager(generator, 512, 800, 3, 12345)
    for i in range(5):
        m.get_chunk(i)
    assert m.get_memory_stats().chunk_count <= 3
    assert [m.has_chunk(i) for i in range(5)] == [False, False, True, True, True]


def test_touch_protects_from_eviction(generator):
    m = ChunkManager(generator, 512, 800, 3, 12345)
    m.get_chunk(0)
    m.get_chunk(1)
    m.get_chunk(2)
    m.get_chunk(0)  # 1 is now least recently used
    m.get_chunk(3)
    assert m.has_chunk(0)
    assert not m.has_chunk(1)
    assert m.lru_order() == [2, 0, 3]


def test_lru_keeps_k_most_recent(generator):
    k = 4
    m = ChunkManager(generator, 512, 800, k, 1)
    accesses = [5, 1, 9, 5, 2, 7, 1, 3, 8, 2]
    for i in accesses:
        m.get_chunk(i)

    recency = []
    for i in reversed(accesses):
        if i not in recency:
            recency.append(i)
    expected = set(recency[:k])
    assert {i for i in set(accesses) if m.has_chunk(i)} == expected
    assert len(m) == k


def test_eviction_clears_chunk_cache(generator):
    m = ChunkManager(generator, 512, 800, 1, 1)
    first = m.get_chunk(0)
    first.cached_svg = "<g/>"
    m.get_chunk(1)
    assert first.cached_svg is None


def test_failing_generator_leaves_nothing_behind(generator):
    def broken(x, seed):
        raise RuntimeError("generator exploded")

    m = ChunkManager(generator, 512, 800, 3, 1)
    m.get_chunk(0)
    m.set_generator(broken)
    with pytest.raises(RuntimeError, match="exploded"):
        m.get_chunk(1)
    assert not m.has_chunk(1)
    assert len(m) == 0
    assert m.lru_order() == []
    assert m.get_state().generated_range == GeneratedRange(0, 0)


def test_visible_chunks_scenario(manager):
    viewport = Viewport(500, 0, 1000, 800)
    visible = manager.get_visible_chunks(viewport)
    # candidate range is [0, 3]; chunk 3 starts at 1536, past the right edge
    assert 2 <= len(visible) <= 3
    assert [c.index for c in visible] == [0, 1, 2]
    # every candidate was generated, even the one filtered out
    assert all(manager.has_chunk(i) for i in range(4))


@pytest.mark.parametrize("x,width", [(500, 1000), (-700, 300), (13, 511), (1030, 2000), (-1, 2)])
def test_visible_chunks_match_half_open_overlap(manager, x, width):
    visible = manager.get_visible_chunks(Viewport(x, 0, width, 800))
    indices = [c.index for c in visible]
    assert indices == sorted(set(indices))
    expected = [
        i for i in range(-10, 10)
        if i * 512 < x + width and x < (i + 1) * 512
    ]
    assert indices == expected


def test_visible_chunks_include_edge_touching_chunk(manager):
    # viewport ends exactly where chunk 2 begins; touching counts as visible
    visible = manager.get_visible_chunks(Viewport(512, 0, 512, 800))
    assert [c.index for c in visible] == [1, 2]


def test_preload_chunks(manager):
    manager.preload_chunks(Viewport(1024, 0, 512, 800), 2)
    assert all(manager.has_chunk(i) for i in range(0, 6))
    assert not manager.has_chunk(-1)


def test_preload_returns_nothing(manager):
    assert manager.preload_chunks(Viewport(0, 0, 512, 800)) is None


def test_clear(manager):
    for i in range(3):
        manager.get_chunk(i)
    manager.clear()
    stats = manager.get_memory_stats()
    assert stats.chunk_count == 0
    assert stats.average_memory_per_chunk == 0
    assert manager.lru_order() == []
    assert manager.get_state().generated_range == GeneratedRange(0, 0)


def test_set_generator_drops_stale_chunks(manager, generator):
    old = manager.get_chunk(0)
    assert manager.has_chunk(0)

    manager.set_generator(lambda x, seed: [])
    assert not manager.has_chunk(0)

    fresh = manager.get_chunk(0)
    assert fresh is not old
    assert fresh.elements == []
    assert fresh.seed == old.seed


def test_memory_stats(manager):
    manager.get_chunk(0)
    manager.get_chunk(1)
    stats = manager.get_memory_stats()
    assert stats.chunk_count == 2
    assert stats.total_memory == 600
    assert stats.average_memory_per_chunk == 300


def test_state_is_a_snapshot(manager):
    manager.get_chunk(0)
    state = manager.get_state()
    manager.get_chunk(1)
    assert list(state.chunks) == [0]
    assert state.viewport == Viewport(0, 0, 0, 0)
