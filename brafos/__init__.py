"""A simulated hobby operating system: framebuffer console, chained-sector file system and text editor."""

__version__ = "0.1.0"