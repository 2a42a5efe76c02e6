"""Tests for dependency container and global state."""

from collections.abc import Iterator

import pytest

from sandbox_mcp.config import Settings
from sandbox_mcp.dependencies import Dependencies
from sandbox_mcp.services import (
    ControlClient,
    ObjectStoreClient,
    get_control_client,
    get_dependencies,
    get_object_store,
    get_settings,
    reset_state,
    set_dependencies,
)


@pytest.fixture(autouse=True)
def clean_state() -> Iterator[None]:
    """Reset global state around each test."""
    reset_state()
    yield
    reset_state()


def test_from_settings_wires_clients() -> None:
    """Clients receive base URL, token and timeouts from settings."""
    settings = Settings(
        api_token="pat",
        api_base_url="https://api.example.test/v0.1",
        api_timeout=12.0,
        transfer_timeout=99.0,
    )

    deps = Dependencies.from_settings(settings)

    assert isinstance(deps.control, ControlClient)
    assert isinstance(deps.store, ObjectStoreClient)
    assert deps.control.base_url == "https://api.example.test/v0.1"
    assert deps.control.timeout == 12.0
    assert deps.store.timeout == 99.0
    assert deps.settings is settings


def test_create_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Dependencies.create builds settings from the environment."""
    monkeypatch.setenv("SANDBOX_API_TOKEN", "env-token")
    monkeypatch.setenv("SANDBOX_API_BASE_URL", "https://env.example.test/")

    deps = Dependencies.create()

    assert deps.settings.api_token == "env-token"
    assert deps.control.base_url == "https://env.example.test"


def test_getters_share_one_container(monkeypatch: pytest.MonkeyPatch) -> None:
    """Getters create the container once and reuse it."""
    monkeypatch.delenv("SANDBOX_API_TOKEN", raising=False)

    deps = get_dependencies()

    assert get_dependencies() is deps
    assert get_settings() is deps.settings
    assert get_control_client() is deps.control
    assert get_object_store() is deps.store


def test_set_dependencies_overrides() -> None:
    """set_dependencies injects a custom container."""
    deps = Dependencies.from_settings(Settings(api_token="x"))

    set_dependencies(deps)

    assert get_dependencies() is deps


def test_reset_state_forgets_container() -> None:
    """reset_state forces a fresh container on next access."""
    first = get_dependencies()
    reset_state()
    assert get_dependencies() is not first
