"""Document digest toolkit: summarise heterogeneous documents with an LLM provider."""

__version__ = "0.1.0"

__all__: list[str] = ["__version__"]
