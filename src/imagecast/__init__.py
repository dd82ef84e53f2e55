"""imagecast: turn uploaded still images into short live streams.

Each image is looped into a ten second feed by ffmpeg and pushed to a freshly
provisioned Daydream stream. Playback manifests are relayed back to viewers
through ``/proxy-hls``.
"""

__all__: list[str] = []
