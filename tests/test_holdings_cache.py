# /tests/test_holdings_cache.py

from cache.holdings_cache import load, save


def test_load_missing_returns_none(tmp_path):
    assert load("etf_holdings", tmp_path) is None


def test_save_then_load(tmp_path):
    save("sectors", {"AAPL": {"symbol": "AAPL", "sector": "Technology"}}, tmp_path)

    records, fetched_at = load("sectors", tmp_path)
    assert records == {"AAPL": {"symbol": "AAPL", "sector": "Technology"}}
    assert fetched_at
    assert (tmp_path / "sectors_snapshot.json").exists()


def test_save_merges_by_symbol(tmp_path):
    save("sectors", {"AAPL": {"sector": "Technology"}, "XOM": {"sector": "Energy"}}, tmp_path)
    save("sectors", {"AAPL": {"sector": "Consumer Electronics"}}, tmp_path)

    records, _ = load("sectors", tmp_path)
    assert records == {
        "AAPL": {"sector": "Consumer Electronics"},
        "XOM": {"sector": "Energy"},
    }


def test_kinds_are_separate_files(tmp_path):
    save("sectors", {"AAPL": {}}, tmp_path)
    assert load("etf_holdings", tmp_path) is None


def test_unreadable_cache_is_ignored(tmp_path):
    (tmp_path / "sectors_snapshot.json").write_text("{not json")
    assert load("sectors", tmp_path) is None


def test_load_does_not_create_cache_dir(tmp_path):
    cache_dir = tmp_path / "nested" / "cache"
    assert load("sectors", cache_dir) is None
    assert not cache_dir.exists()


def test_save_creates_cache_dir(tmp_path):
    cache_dir = tmp_path / "nested" / "cache"
    save("sectors", {"AAPL": {"sector": "Technology"}}, cache_dir)
    assert (cache_dir / "sectors_snapshot.json").exists()
