"""Per-frame audio feature extraction.

Frames arrive as non-negative frequency-bin magnitudes (the shape a browser
analyser node or an rFFT produces). Every feature is a pure function of the
frame; liveness tracking lives in :class:`FrameWatchdog` so the extractor
itself carries no hidden state.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from ..entities.audio import AudioFeatures
from ..exceptions import CaptureStalled

logger = logging.getLogger(__name__)

DEFAULT_SPEECH_BAND_HZ = (80.0, 4000.0)


def _clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return max(lower, min(upper, value))


class AudioFeatureExtractor:
    """Derive volume, dominant frequency and clarity from one spectrum frame."""
    
    def __init__(
        self,
        max_magnitude: float = 255.0,
        speech_band_hz: tuple[float, float] = DEFAULT_SPEECH_BAND_HZ,
    ):
        """
        Args:
            max_magnitude: Magnitude that maps to a volume of 100.
            speech_band_hz: Low and high edge of the band treated as voiced speech.
        """
        if max_magnitude <= 0:
            raise ValueError("max_magnitude must be positive")
        low, high = speech_band_hz
        if not 0 <= low < high:
            raise ValueError(f"Invalid speech band {speech_band_hz}")
        self.max_magnitude = max_magnitude
        self.speech_band_hz = (float(low), float(high))
    
    def extract(self, magnitudes: Sequence[float], sample_rate: int) -> AudioFeatures:
        """Compute the scalar features of a single frame.
        
        Args:
            magnitudes: N frequency-bin magnitudes covering 0 Hz to Nyquist.
            sample_rate: Sampling rate of the captured audio in Hz.
        
        Returns:
            AudioFeatures with ``estimated_words_per_minute`` left at 0.
        """
        bins = np.asarray(magnitudes, dtype=np.float64).ravel()
        bins = np.clip(np.nan_to_num(bins, nan=0.0, posinf=self.max_magnitude, neginf=0.0), 0.0, None)
        if bins.size == 0:
            return AudioFeatures()
        
        volume = _clamp(float(bins.mean()) / self.max_magnitude * 100.0)
        dominant_frequency = int(np.argmax(bins)) * sample_rate / (2 * bins.size)
        
        total = float(bins.sum())
        if total > 0:
            low, high = self.speech_band_indices(bins.size, sample_rate)
            clarity = _clamp(float(bins[low:high].sum()) / total * 100.0)
        else:
            clarity = 0.0
        
        return AudioFeatures(
            volume=volume,
            dominant_frequency=dominant_frequency,
            clarity=clarity,
        )
    
    def speech_band_indices(self, bin_count: int, sample_rate: int) -> tuple[int, int]:
        """Return the half-open bin range covering the speech band."""
        bin_width = sample_rate / (2 * bin_count)
        low_hz, high_hz = self.speech_band_hz
        low = min(bin_count, int(math.floor(low_hz / bin_width)))
        high = min(bin_count, int(math.ceil(high_hz / bin_width)))
        return low, max(low, high)
    
    @staticmethod
    def estimate_words_per_minute(word_count: int, elapsed_ms: float) -> float:
        """Speaking rate from caller-supplied transcript length and elapsed session time."""
        if elapsed_ms <= 0 or word_count <= 0:
            return 0.0
        return word_count / (elapsed_ms / 60000.0)
    
    def with_speaking_rate(
        self, features: AudioFeatures, word_count: int, elapsed_ms: float
    ) -> AudioFeatures:
        """Return a copy of ``features`` carrying the estimated speaking rate."""
        rate = self.estimate_words_per_minute(word_count, elapsed_ms)
        return features.model_copy(update={"estimated_words_per_minute": rate})


class FrameWatchdog:
    """Liveness tracking for the capture stream.
    
    The watchdog only observes timestamps handed to it; it never touches the
    device and never retries acquisition.
    """
    
    def __init__(self, timeout_seconds: float):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.timeout_seconds = timeout_seconds
        self._last_frame_at: Optional[float] = None
    
    def reset(self, now: float) -> None:
        """Start a new liveness window, typically when capture begins."""
        self._last_frame_at = now
    
    def mark_frame(self, now: float) -> None:
        self._last_frame_at = now
    
    def seconds_since_last_frame(self, now: float) -> float:
        if self._last_frame_at is None:
            return 0.0
        return max(0.0, now - self._last_frame_at)
    
    def is_stalled(self, now: float) -> bool:
        return self.seconds_since_last_frame(now) > self.timeout_seconds
    
    def check(self, now: float, session_id: Optional[str] = None) -> None:
        """Raise :class:`CaptureStalled` if the liveness window has elapsed."""
        if self.is_stalled(now):
            silence = self.seconds_since_last_frame(now)
            logger.warning(f"Capture stalled: no frame for {silence:.2f}s")
            raise CaptureStalled(silence, session_id=session_id)


def spectrum_from_pcm(
    pcm_bytes: bytes,
    fft_size: int = 2048,
    min_decibels: float = -100.0,
    max_decibels: float = -30.0,
) -> np.ndarray:
    """Convert a PCM16LE mono chunk into byte-scaled magnitude bins.
    
    Mirrors a browser analyser node: Blackman window, real FFT, magnitudes in
    dB mapped linearly from ``[min_decibels, max_decibels]`` onto ``[0, 255]``.
    Short chunks are zero-padded and long chunks use their most recent
    ``fft_size`` samples.
    
    Returns:
        ``fft_size // 2`` magnitudes.
    """
    usable = len(pcm_bytes) - (len(pcm_bytes) % 2)
    samples = np.frombuffer(pcm_bytes[:usable], dtype="<i2").astype(np.float64) / 32768.0
    if samples.size >= fft_size:
        samples = samples[-fft_size:]
    else:
        samples = np.pad(samples, (0, fft_size - samples.size))
    
    spectrum = np.abs(np.fft.rfft(samples * np.blackman(fft_size)))[: fft_size // 2] / fft_size
    decibels = 20.0 * np.log10(np.maximum(spectrum, 1e-12))
    scaled = (decibels - min_decibels) / (max_decibels - min_decibels) * 255.0
    return np.clip(scaled, 0.0, 255.0)
