"""Assemble a size-bounded textual snapshot of a source tree for an LLM."""

__version__ = "0.1.0"
