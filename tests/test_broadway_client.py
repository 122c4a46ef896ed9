"""Tests for the Broadway dataset client and its on-disk cache."""
import pickle

import pandas as pd
import pytest
import requests
from unittest.mock import patch, MagicMock

from utils.broadway_client import (
    CorruptCacheError,
    NetworkError,
    UnknownDatasetError,
    cache_path,
    clear_cache,
    ensure_dataset,
    fetch_dataset,
    get_cache_info,
    load_cached,
)

SYNOPSES_CSV = "show,synopsis\nHamilton,The story of America then.\nWicked,Two witches.\n"


def _ok_response(text=SYNOPSES_CSV):
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.text = text
    return mock_response


class TestFetchDataset:
    """Tests for downloading with mocked HTTP."""

    @patch('utils.broadway_client.requests.get')
    def test_successful_fetch(self, mock_get):
        """Should parse the CSV body into a DataFrame."""
        mock_get.return_value = _ok_response()

        df = fetch_dataset("synopses")

        assert list(df.columns) == ["show", "synopsis"]
        assert len(df) == 2
        mock_get.assert_called_once()
        assert mock_get.call_args[0][0].endswith("synopses.csv")

    @patch('utils.broadway_client.requests.get')
    def test_timeout_raises_network_error(self, mock_get):
        """Should raise NetworkError on timeout."""
        mock_get.side_effect = requests.exceptions.Timeout()

        with pytest.raises(NetworkError, match="Timeout"):
            fetch_dataset("synopses")

    @patch('utils.broadway_client.requests.get')
    def test_connection_error_raises_network_error(self, mock_get):
        """Should raise NetworkError when the host is unreachable."""
        mock_get.side_effect = requests.exceptions.ConnectionError("no route")

        with pytest.raises(NetworkError, match="Request error"):
            fetch_dataset("grosses")

    @patch('utils.broadway_client.requests.get')
    def test_http_error_raises_network_error(self, mock_get):
        """Should raise NetworkError carrying the status code."""
        mock_response = MagicMock()
        mock_response.status_code = 404
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=mock_response)
        mock_get.return_value = mock_response

        with pytest.raises(NetworkError, match="404"):
            fetch_dataset("grosses")

    @patch('utils.broadway_client.requests.get')
    def test_empty_body_raises_network_error(self, mock_get):
        """An empty body is malformed."""
        mock_get.return_value = _ok_response(text="")

        with pytest.raises(NetworkError, match="Malformed"):
            fetch_dataset("synopses")

    @patch('utils.broadway_client.requests.get')
    def test_header_only_body_raises_network_error(self, mock_get):
        """A CSV without rows is rejected."""
        mock_get.return_value = _ok_response(text="show,synopsis\n")

        with pytest.raises(NetworkError, match="no rows"):
            fetch_dataset("synopses")

    def test_unknown_dataset(self):
        with pytest.raises(UnknownDatasetError):
            fetch_dataset("tony_awards")


class TestEnsureDataset:
    """Tests for the download-once cache behaviour."""

    @patch('utils.broadway_client.requests.get')
    def test_first_call_downloads_and_writes_cache(self, mock_get, tmp_path):
        mock_get.return_value = _ok_response()

        df = ensure_dataset("synopses", cache_dir=tmp_path)

        assert len(df) == 2
        assert cache_path("synopses", tmp_path).exists()
        mock_get.assert_called_once()

    @patch('utils.broadway_client.requests.get')
    def test_warm_cache_is_idempotent_without_network(self, mock_get, tmp_path):
        """Two warm calls return identical tables and never hit the network again."""
        mock_get.return_value = _ok_response()
        ensure_dataset("synopses", cache_dir=tmp_path)
        path = cache_path("synopses", tmp_path)
        bytes_before = path.read_bytes()

        first = ensure_dataset("synopses", cache_dir=tmp_path)
        second = ensure_dataset("synopses", cache_dir=tmp_path)

        assert mock_get.call_count == 1
        pd.testing.assert_frame_equal(first, second)
        assert path.read_bytes() == bytes_before

    @patch('utils.broadway_client.requests.get')
    def test_existing_cache_skips_network(self, mock_get, tmp_path):
        cached = pd.DataFrame({"show": ["Cats"], "synopsis": ["Cats."]})
        cached.to_pickle(cache_path("synopses", tmp_path))

        df = ensure_dataset("synopses", cache_dir=tmp_path)

        mock_get.assert_not_called()
        pd.testing.assert_frame_equal(df, cached)

    @patch('utils.broadway_client.requests.get')
    def test_network_failure_leaves_no_cache(self, mock_get, tmp_path):
        mock_get.side_effect = requests.exceptions.Timeout()

        with pytest.raises(NetworkError):
            ensure_dataset("grosses", cache_dir=tmp_path)

        assert not cache_path("grosses", tmp_path).exists()


class TestCorruptCache:
    """Tests for unreadable cache files."""

    def test_garbage_file_raises_corrupt_cache(self, tmp_path):
        path = cache_path("grosses", tmp_path)
        path.write_bytes(b"not a pickle at all")

        with pytest.raises(CorruptCacheError):
            load_cached(path)

    def test_non_dataframe_pickle_raises_corrupt_cache(self, tmp_path):
        path = cache_path("grosses", tmp_path)
        with open(path, "wb") as f:
            pickle.dump({"not": "a table"}, f)

        with pytest.raises(CorruptCacheError, match="dict"):
            load_cached(path)

    @patch('utils.broadway_client.requests.get')
    def test_corrupt_cache_is_not_deleted_or_refetched(self, mock_get, tmp_path):
        path = cache_path("synopses", tmp_path)
        path.write_bytes(b"garbage")

        with pytest.raises(CorruptCacheError):
            ensure_dataset("synopses", cache_dir=tmp_path)

        assert path.exists()
        mock_get.assert_not_called()

    @patch('utils.broadway_client.requests.get')
    def test_clear_then_refetch_recovers(self, mock_get, tmp_path):
        mock_get.return_value = _ok_response()
        path = cache_path("synopses", tmp_path)
        path.write_bytes(b"garbage")

        removed = clear_cache("synopses", cache_dir=tmp_path)
        df = ensure_dataset("synopses", cache_dir=tmp_path)

        assert removed == [path]
        assert len(df) == 2
        mock_get.assert_called_once()


class TestCacheInfo:
    def test_reports_each_dataset(self, tmp_path):
        pd.DataFrame({"a": [1]}).to_pickle(cache_path("grosses", tmp_path))

        info = get_cache_info(tmp_path)

        assert set(info) == {"grosses", "synopses"}
        assert info["grosses"]["exists"] is True
        assert info["grosses"]["size_bytes"] > 0
        assert info["synopses"]["exists"] is False
        assert info["synopses"]["modified"] is None

    def test_clear_all(self, tmp_path):
        for name in ("grosses", "synopses"):
            pd.DataFrame({"a": [1]}).to_pickle(cache_path(name, tmp_path))

        removed = clear_cache(cache_dir=tmp_path)

        assert len(removed) == 2
        assert not any(v["exists"] for v in get_cache_info(tmp_path).values())
