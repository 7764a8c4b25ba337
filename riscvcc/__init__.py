"""Syntax trees, semantic analysis and RISC-V assembly generation for a small C-like language."""

__version__ = "0.1.0"