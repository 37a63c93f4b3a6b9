"""Unit tests for audio feature extraction and capture liveness."""

import numpy as np
import pytest

from fluency_coach.domain.entities.audio import AudioFeatures
from fluency_coach.domain.exceptions import CaptureStalled
from fluency_coach.domain.services.audio_feature_extractor import (
    AudioFeatureExtractor,
    FrameWatchdog,
    spectrum_from_pcm,
)


@pytest.fixture
def extractor():
    return AudioFeatureExtractor()


class TestAudioFeatureExtractor:
    """Tests for per-frame features."""

    def test_silent_frame(self, extractor):
        """Test that an all-zero frame yields zero features."""
        features = extractor.extract([0.0] * 1024, 16000)

        assert features.volume == 0.0
        assert features.dominant_frequency == 0.0
        assert features.clarity == 0.0

    def test_empty_frame(self, extractor):
        assert extractor.extract([], 16000) == AudioFeatures()

    def test_volume_is_mean_over_max(self, extractor):
        """Test that volume scales the mean magnitude onto 0-100."""
        features = extractor.extract([127.5] * 1024, 16000)
        assert features.volume == pytest.approx(50.0)

    def test_full_scale_volume(self, extractor):
        features = extractor.extract([255.0] * 8, 16000)
        assert features.volume == pytest.approx(100.0)

    def test_dominant_frequency_from_loudest_bin(self, extractor):
        """Test that the loudest bin maps to index * sample_rate / (2N)."""
        magnitudes = [0.0] * 1024
        magnitudes[64] = 200.0
        features = extractor.extract(magnitudes, 16000)
        assert features.dominant_frequency == pytest.approx(64 * 16000 / 2048)

    def test_clarity_all_energy_in_speech_band(self, extractor):
        """Test that energy concentrated at 500 Hz is fully clear."""
        magnitudes = [0.0] * 1024
        magnitudes[64] = 200.0  # 500 Hz
        assert extractor.extract(magnitudes, 16000).clarity == pytest.approx(100.0)

    def test_clarity_energy_outside_speech_band(self, extractor):
        """Test that energy above the speech band does not count as clear."""
        magnitudes = [0.0] * 1024
        magnitudes[900] = 200.0  # ~7 kHz
        assert extractor.extract(magnitudes, 16000).clarity == pytest.approx(0.0)

    def test_clarity_is_band_share(self, extractor):
        magnitudes = [0.0] * 1024
        magnitudes[64] = 100.0
        magnitudes[900] = 100.0
        assert extractor.extract(magnitudes, 16000).clarity == pytest.approx(50.0)

    def test_nan_and_negative_values_sanitized(self, extractor):
        """Test that invalid magnitudes never produce out-of-range features."""
        features = extractor.extract([float("nan"), -50.0, 10.0, 10.0], 16000)
        assert 0.0 <= features.volume <= 100.0
        assert 0.0 <= features.clarity <= 100.0

    def test_accepts_numpy_arrays(self, extractor):
        features = extractor.extract(np.full(512, 51.0), 16000)
        assert features.volume == pytest.approx(20.0)

    def test_speech_band_indices(self, extractor):
        # 1024 bins over 8 kHz is 7.8125 Hz per bin
        assert extractor.speech_band_indices(1024, 16000) == (10, 512)

    def test_estimate_words_per_minute(self):
        assert AudioFeatureExtractor.estimate_words_per_minute(30, 12000) == pytest.approx(150.0)
        assert AudioFeatureExtractor.estimate_words_per_minute(30, 0) == 0.0

    def test_with_speaking_rate_returns_copy(self, extractor):
        features = AudioFeatures(volume=40.0, clarity=80.0)
        updated = extractor.with_speaking_rate(features, 10, 6000)

        assert updated.estimated_words_per_minute == pytest.approx(100.0)
        assert updated.volume == 40.0
        assert features.estimated_words_per_minute == 0.0

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            AudioFeatureExtractor(max_magnitude=0)
        with pytest.raises(ValueError):
            AudioFeatureExtractor(speech_band_hz=(4000.0, 80.0))


class TestFrameWatchdog:
    """Tests for capture liveness tracking."""

    def test_not_stalled_within_window(self):
        watchdog = FrameWatchdog(3.0)
        watchdog.reset(100.0)
        assert watchdog.is_stalled(103.0) is False

    def test_stalled_after_window(self):
        watchdog = FrameWatchdog(3.0)
        watchdog.reset(100.0)
        assert watchdog.is_stalled(103.5) is True

    def test_frame_restarts_window(self):
        watchdog = FrameWatchdog(3.0)
        watchdog.reset(100.0)
        watchdog.mark_frame(102.0)
        assert watchdog.is_stalled(104.5) is False
        assert watchdog.seconds_since_last_frame(104.5) == pytest.approx(2.5)

    def test_check_raises_capture_stalled(self):
        """Test that check() raises with the silence duration."""
        watchdog = FrameWatchdog(1.0)
        watchdog.reset(0.0)
        with pytest.raises(CaptureStalled) as exc_info:
            watchdog.check(2.0, session_id="session-1")
        assert exc_info.value.silence_seconds == pytest.approx(2.0)
        assert exc_info.value.session_id == "session-1"

    def test_invalid_timeout(self):
        with pytest.raises(ValueError):
            FrameWatchdog(0)


class TestSpectrumFromPcm:
    """Tests for PCM to spectrum conversion."""

    def test_output_length(self):
        assert spectrum_from_pcm(b"\x00\x00" * 100, fft_size=512).shape == (256,)

    def test_silence_maps_to_zero(self):
        spectrum = spectrum_from_pcm(b"\x00\x00" * 2048)
        assert float(spectrum.max()) == 0.0

    def test_tone_peaks_at_its_frequency(self):
        """Test that a 1 kHz tone produces a peak near the 1 kHz bin."""
        sample_rate = 16000
        t = np.arange(2048) / sample_rate
        samples = (0.5 * np.sin(2 * np.pi * 1000 * t) * 32767).astype("<i2")
        spectrum = spectrum_from_pcm(samples.tobytes(), fft_size=2048)

        assert 0.0 <= float(spectrum.min()) and float(spectrum.max()) <= 255.0
        peak_hz = int(np.argmax(spectrum)) * sample_rate / 2048
        assert peak_hz == pytest.approx(1000.0, abs=16.0)

    def test_odd_byte_is_ignored(self):
        assert spectrum_from_pcm(b"\x00\x00\x00", fft_size=64).shape == (32,)
