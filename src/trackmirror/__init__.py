"""trackmirror: resolve track identifiers and bind playable streams via mirror providers."""

__version__ = "0.1.0"
