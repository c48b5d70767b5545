import pytest

from otlpmetric.utils.path import clean_path, has_scheme, join_path


@pytest.mark.parametrize(
    "url_path, default_path, expected",
    [
        ("", "DefaultPath", "DefaultPath"),
        ("   ", "DefaultPath", "DefaultPath"),
        ("/prefix/v1/metrics", "DefaultMetricsPath", "/prefix/v1/metrics"),
        ("https://env_endpoint", "DefaultTracesPath", "/https:/env_endpoint"),
        (" /dir", "", "/dir"),
        ("dir/..", "DefaultTracesPath", "DefaultTracesPath"),
        ("dir/a", "", "/dir/a"),
        ("//a//b/./c/", "/d", "/a/b/c"),
        ("/..", "/d", "/"),
    ],
)
def test_clean_path(url_path, default_path, expected):
    assert clean_path(url_path, default_path) == expected


@pytest.mark.parametrize(
    "url, expected",
    [
        ("localhost:3422", False),
        ("https://127.0.0.1:3422", True),
        ("HtTpS://127.0.0.1:3422", True),
        ("http://127.0.0.1:3422", True),
        ("HtTp://127.0.0.1:3422", True),
        # Shape only: unsupported schemes still count as a scheme.
        ("ftp://127.0.0.1:3422", True),
        ("unix:///tmp/otel.sock", True),
        ("git+ssh://host", True),
        ("1http://host", False),
        ("://host", False),
        ("example.com/base", False),
    ],
)
def test_has_scheme(url, expected):
    assert has_scheme(url) is expected


def test_join_path_keeps_base_prefix():
    assert join_path("/base", "/v1/metrics") == "/base/v1/metrics"
    assert join_path("", "/v1/metrics") == "/v1/metrics"
    assert join_path("/base/", "v1/metrics") == "/base/v1/metrics"
    assert join_path("collector:4317", "") == "collector:4317"
    assert join_path("", "") == ""
