from unittest.mock import patch

import pytest

from pubcompass.__main__ import main
from pubcompass.exceptions import RetrievalFailed, RetrievalNetworkError
from pubcompass.models import GeoPoint, PointOfInterest


def crown():
    return PointOfInterest(42, "The Crown", GeoPoint(51.501, -0.101), 131.0)


def test_prints_nearest_pub(capsys):
    with patch("pubcompass.overpass.PubFetcher.fetch_nearby", return_value=[crown()]) as fetch:
        assert main(["--lat", "51.5", "--lon", "-0.1", "--radius", "800"]) == 0

    fetch.assert_called_once_with(GeoPoint(51.5, -0.1), 800)
    out = capsys.readouterr().out
    assert "Nearest pub: The Crown" in out
    assert "131m away" in out


def test_no_pubs_found(capsys):
    with patch("pubcompass.overpass.PubFetcher.fetch_nearby", return_value=[]):
        assert main(["--lat", "51.5", "--lon", "-0.1"]) == 0
    assert "No pubs found within 1.5km" in capsys.readouterr().out


def test_retrieval_failure_exit_code(capsys):
    error = RetrievalFailed(RetrievalNetworkError("offline"), 3)
    with patch("pubcompass.overpass.PubFetcher.fetch_nearby", side_effect=error):
        assert main(["--lat", "51.5", "--lon", "-0.1"]) == 1
    assert "Failed to find nearby pubs" in capsys.readouterr().out


def test_lat_requires_lon():
    with pytest.raises(SystemExit):
        main(["--lat", "51.5"])


def test_missing_heading_trace(tmp_path, capsys):
    assert main(["--lat", "1", "--lon", "1", "--heading-trace", str(tmp_path / "none.json")]) == 1
    assert "Heading trace not found" in capsys.readouterr().out
