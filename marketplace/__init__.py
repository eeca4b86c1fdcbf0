"""marketplace-core: enum column codec and OAuth2 identity normalization."""

__version__ = "0.1.0"
