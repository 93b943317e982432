"""Tests for the place cache."""

from tzbands.core.cache import Place, PlaceCache, cache_key


class TestCacheKey:
    def test_rounds_to_three_decimals(self):
        assert cache_key(37.56651, 126.97801) == "37.567,126.978"

    def test_nearby_points_share_key(self):
        assert cache_key(10.00001, 20.00004) == cache_key(10.00004, 20.00001)

    def test_distinct_points(self):
        assert cache_key(10.001, 20.0) != cache_key(10.002, 20.0)


class TestPlaceCache:
    def test_miss_returns_none(self):
        assert PlaceCache().get(1.0, 2.0) is None

    def test_put_and_get(self):
        cache = PlaceCache()
        place = Place("Seoul, South Korea", "kr")
        cache.put(37.5665, 126.978, place)
        assert cache.get(37.56651, 126.97801) == place
        assert len(cache) == 1
        assert "37.567,126.978" in cache

    def test_lru_eviction(self):
        cache = PlaceCache(max_entries=2)
        cache.put(1.0, 1.0, Place("a"))
        cache.put(2.0, 2.0, Place("b"))
        cache.get(1.0, 1.0)  # a is now most recent
        cache.put(3.0, 3.0, Place("c"))
        assert cache.get(2.0, 2.0) is None
        assert cache.get(1.0, 1.0) == Place("a")
        assert cache.get(3.0, 3.0) == Place("c")

    def test_zero_means_unbounded(self):
        cache = PlaceCache(max_entries=0)
        for i in range(500):
            cache.put(float(i), 0.0, Place(str(i)))
        assert len(cache) == 500

    def test_overwrite_same_key(self):
        cache = PlaceCache()
        cache.put(1.0, 1.0, Place("old"))
        cache.put(1.0001, 1.0001, Place("new"))
        assert len(cache) == 1
        assert cache.get(1.0, 1.0) == Place("new")

    def test_clear(self):
        cache = PlaceCache()
        cache.put(1.0, 1.0, Place("a"))
        cache.clear()
        assert len(cache) == 0
