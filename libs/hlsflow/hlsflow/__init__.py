"""HLSFlow: turns uploaded videos into tokenized HLS adaptive-bitrate packages."""

__version__ = "0.1.0"
