"""CloudLeaf - peer-to-peer book lending."""

__version__ = "0.1.0"
