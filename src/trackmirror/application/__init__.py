"""Application layer - resolution, mirroring and playback services."""
