"""specwatch: archive and diff a remote API schema document whenever it changes."""

__version__ = "0.3.0"
