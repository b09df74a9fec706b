"""PCM Format - frame and duration arithmetic for raw audio.

Raw PCM carries no header, so every size and timing calculation is
derived from the sample rate, channel count and sample width.
"""

from dataclasses import dataclass

from openai_tts.config.constants import PCM


@dataclass(frozen=True)
class PCMFormat:
    """Raw interleaved PCM layout.

    Attributes:
        sample_rate: Samples per second per channel
        channels: Interleaved channel count
        bytes_per_sample: Width of one sample (2 for 16-bit)
    """

    sample_rate: int = PCM.SAMPLE_RATE
    channels: int = PCM.CHANNELS
    bytes_per_sample: int = PCM.BYTES_PER_SAMPLE

    def __post_init__(self) -> None:
        if self.sample_rate <= 0 or self.channels <= 0 or self.bytes_per_sample <= 0:
            raise ValueError("PCM format values must be positive")

    @property
    def frame_size(self) -> int:
        """Bytes in one sample frame (one sample for every channel)."""
        return self.channels * self.bytes_per_sample

    @property
    def bytes_per_second(self) -> int:
        return self.sample_rate * self.frame_size

    def duration_ms(self, byte_count: int) -> float:
        """Playback duration of byte_count bytes in milliseconds."""
        return byte_count / self.bytes_per_second * 1000

    def aligned_length(self, byte_count: int) -> int:
        """Largest whole-frame length not exceeding byte_count."""
        return byte_count - (byte_count % self.frame_size)


DEFAULT_PCM_FORMAT = PCMFormat()
