"""videocompress - size-aware video compression over HTTP.

Wraps the ffmpeg binary behind a small encoding-policy engine that turns a
(file size, speed mode, codec, hardware) request into a deterministic set of
transcode parameters.
"""

__version__ = "0.1.0"
