# This project was developed with assistance from AI tools.
"""Tests for the object storage helpers."""

import pytest

from homestay_api.services import storage as storage_mod
from homestay_api.services.storage import StorageService


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("jamabandi.pdf", "HP-HS-2026-SHI-000101/revenue_papers/7-jamabandi.pdf"),
        ("../../etc/passwd", "HP-HS-2026-SHI-000101/revenue_papers/7-passwd"),
        ("front view (1).jpg", "HP-HS-2026-SHI-000101/revenue_papers/7-front_view_1_.jpg"),
        ("", "HP-HS-2026-SHI-000101/revenue_papers/7-upload"),
    ],
)
def test_build_object_key(filename, expected):
    key = StorageService.build_object_key("HP-HS-2026-SHI-000101", "revenue_papers", 7, filename)
    assert key == expected


def test_service_must_be_initialised(monkeypatch):
    monkeypatch.setattr(storage_mod, "_service", None)
    with pytest.raises(RuntimeError, match="not initialised"):
        storage_mod.get_storage_service()
