import pytest

from authorhaven.config import Config


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("a.com,b.com", ["a.com", "b.com"]),
        (" a.com , b.com ,", ["a.com", "b.com"]),
        ("*", ["*"]),
        ('["http://localhost:3000", "https://authorhaven.com"]', ["http://localhost:3000", "https://authorhaven.com"]),
    ],
)
def test_cors_origins_from_env(monkeypatch, raw, expected):
    monkeypatch.setenv("CORS_ORIGINS", raw)
    assert Config().CORS_ORIGINS == expected


def test_cors_origins_default(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    assert Config(_env_file=None).CORS_ORIGINS == ["http://localhost:3000", "http://localhost"]


def test_cors_origins_as_list():
    assert Config(CORS_ORIGINS=["a.com"]).CORS_ORIGINS == ["a.com"]
