import io
import tarfile
import time

import platformdirs
import pytest
import requests
import yaml

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """
    Register the markers used to group the tilefetch test suite.

    Parameters:
        config: pytest.Config
            The pytest configuration object used to register markers.
    """
    config.addinivalue_line("markers", "unit: fast tests with no I/O beyond tmp_path")
    config.addinivalue_line(
        "markers", "core_downloads: release resolution and download behaviour"
    )
    config.addinivalue_line("markers", "configuration: configuration loading")


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point platformdirs and the XDG variables at a temporary directory layout.

    Keeps configuration lookups and log files away from the real user profile.
    """
    base = tmp_path_factory.mktemp("tilefetch")
    config_dir = base / "config"
    state_dir = base / "state"
    cache_dir = base / "cache"

    for path in (config_dir, state_dir, cache_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.setenv("XDG_STATE_HOME", str(state_dir))
    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))

    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_state_dir", lambda *_args, **_kwargs: str(state_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_cache_dir", lambda *_args, **_kwargs: str(cache_dir)
    )

    # S3 clients built in tests must never find real credentials
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing HTTP entry points with blocking callables.
    """
    requests.get = _block_network
    requests.post = _block_network
    requests.put = _block_network
    requests.delete = _block_network
    requests.head = _block_network
    requests.patch = _block_network
    requests.options = _block_network
    requests.Session.request = _block_network


@pytest.fixture(autouse=True)
def _mock_time_sleep(monkeypatch):
    """
    Make time.sleep instant for all tests to prevent delays.

    Tests that require real timing behavior should explicitly monkeypatch
    sleep back to the real implementation within the test.
    """
    monkeypatch.setattr(time, "sleep", lambda *_args, **_kwargs: None)


@pytest.fixture
def release_dir(tmp_path):
    """Existing, empty releases directory."""
    path = tmp_path / "releases"
    path.mkdir()
    return path


@pytest.fixture
def make_release_tarball():
    """
    Return a factory writing minimal release tarballs.

    The factory takes (directory, filename, name, version, stemcell=None) and
    writes a gzipped tar holding a `release.MF`; a stemcell string such as
    "ubuntu-xenial/190.0.0" marks the release as compiled.
    """

    def _make(directory, filename, name, version, stemcell=None):
        manifest = {"name": name, "version": version, "packages": []}
        if stemcell is not None:
            manifest["compiled_packages"] = [
                {"name": "pkg", "version": "abc", "stemcell": stemcell}
            ]
        data = yaml.safe_dump(manifest).encode()
        path = directory / filename
        with tarfile.open(path, "w:gz") as archive:
            info = tarfile.TarInfo("./release.MF")
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
        return path

    return _make
