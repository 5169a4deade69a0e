"""Audio format shared by capture, decoding and the recognition model."""

SAMPLE_RATE = 16000
CHANNELS = 1
