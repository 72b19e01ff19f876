"""Pytest fixtures for mailru_cloud tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest
from helpers import LOGIN, PASSWORD, FakeCloud

from mailru_cloud import CloudMailClient


@pytest.fixture
def fake_cloud() -> FakeCloud:
    """Create a fresh fake Mail.Ru service."""
    return FakeCloud()


@pytest.fixture
def mock_transport(fake_cloud: FakeCloud) -> httpx.MockTransport:
    return httpx.MockTransport(fake_cloud.handle)


@pytest.fixture
def client(mock_transport: httpx.MockTransport) -> Iterator[CloudMailClient]:
    """Create an authenticated client talking to the fake service."""
    cloud_client = CloudMailClient(LOGIN, PASSWORD, transport=mock_transport)
    yield cloud_client
    cloud_client.close()


@pytest.fixture
def temp_txt(tmp_path: Path) -> Path:
    """Create a small text file for upload tests."""
    txt_path = tmp_path / "a.txt"
    txt_path.write_bytes(b"hello")
    return txt_path
