"""WASP -- scaffolding and chat tooling for UOMI WASM agents."""

__version__ = "1.0.0"
