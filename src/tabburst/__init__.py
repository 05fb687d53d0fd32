"""tabburst — browser-tab load generator for prompt-driven web apps."""

__version__ = "0.1.0"
