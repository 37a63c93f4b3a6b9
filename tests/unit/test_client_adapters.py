"""Unit tests for the client-side capture and recognizer adapters."""

import pytest

from fluency_coach.domain.exceptions import DeviceUnavailable
from fluency_coach.domain.interfaces import AudioCapture, SpeechRecognizer
from fluency_coach.infrastructure import ClientAudioCapture, ClientSpeechRecognizer


def test_adapters_implement_protocols():
    assert isinstance(ClientAudioCapture("c1"), AudioCapture)
    assert isinstance(ClientSpeechRecognizer("c1"), SpeechRecognizer)


@pytest.mark.asyncio
async def test_unavailable_capture_refuses_to_start():
    """Test that a capture marked unavailable raises DeviceUnavailable."""
    capture = ClientAudioCapture("c1")
    capture.mark_unavailable()

    with pytest.raises(DeviceUnavailable):
        await capture.start()
    assert capture.is_active is False


@pytest.mark.asyncio
async def test_capture_can_recover_after_permission_is_granted_again():
    """Test that a capture error does not block later sessions for good."""
    capture = ClientAudioCapture("c1")
    capture.mark_unavailable()
    capture.mark_available()

    await capture.start()

    assert capture.is_active is True
    await capture.stop()
    await capture.stop()
    assert capture.is_active is False
