from __future__ import annotations

import pytest

from tests._helpers import RecordingMap


@pytest.fixture
def recording_map() -> RecordingMap:
    return RecordingMap()
