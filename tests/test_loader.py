"""Tests for the in-process dataset loader."""

from unittest.mock import MagicMock, patch

import pytest

from data.loader import load_synopses, reset_loader_cache
from utils.broadway_client import cache_path, clear_cache

SYNOPSES_CSV = "show,synopsis\nRent,Bohemians.\nCats,Cats.\n"


@pytest.fixture(autouse=True)
def fresh_loader():
    reset_loader_cache()
    yield
    reset_loader_cache()


@pytest.fixture
def mock_get():
    response = MagicMock()
    response.status_code = 200
    response.text = SYNOPSES_CSV
    with patch("utils.broadway_client.requests.get", return_value=response) as mocked:
        yield mocked


class TestLoadSynopses:

    def test_warm_load_skips_network(self, mock_get, tmp_path):
        first = load_synopses(tmp_path)
        second = load_synopses(tmp_path)

        assert mock_get.call_count == 1
        assert len(first) == len(second) == 2

    def test_returns_independent_copies(self, mock_get, tmp_path):
        first = load_synopses(tmp_path)
        first.loc[0, "show"] = "Changed"

        assert load_synopses(tmp_path).loc[0, "show"] == "Rent"

    def test_deleted_cache_file_is_refetched(self, mock_get, tmp_path):
        load_synopses(tmp_path)
        load_synopses(tmp_path)

        clear_cache("synopses", cache_dir=tmp_path)
        df = load_synopses(tmp_path)

        assert mock_get.call_count == 2
        assert cache_path("synopses", tmp_path).exists()
        assert len(df) == 2
