import pytest


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run in an empty directory without leaking env overrides"""
    monkeypatch.chdir(tmp_path)
    for key in ('ZONE', 'API_BASE_URL'):
        # setenv first so teardown removes values written by load_env
        monkeypatch.setenv(key, '')
        monkeypatch.delenv(key)
