from pathlib import Path

from collage_api.settings import Settings, choose_env_file


def test_raw_delivery_url_uses_cloud_name():
    s = Settings(CLD_CLOUD_NAME="demo")
    assert s.raw_delivery_url == "https://res.cloudinary.com/demo/raw/upload"


def test_raw_delivery_url_strips_trailing_slash():
    s = Settings(CLD_CLOUD_NAME="demo", CLD_DELIVERY_BASE="http://cdn.local/")
    assert s.raw_delivery_url == "http://cdn.local/demo/raw/upload"


def test_defaults_match_storage_layout():
    s = Settings()
    assert s.POSTS_PREFIX == "collages"
    assert s.SEARCH_PAGE_SIZE == 100


def test_choose_env_file_prefers_env_local(monkeypatch):
    monkeypatch.setattr(Path, "exists", lambda self: str(self) == ".env.local")
    assert choose_env_file() == ".env.local"


def test_choose_env_file_falls_back(monkeypatch):
    monkeypatch.setattr(Path, "exists", lambda self: False)
    assert choose_env_file() == ".env"
