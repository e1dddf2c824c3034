"""skill-search — discover, index, and rank agent skills from public registries."""

__version__ = "0.1.0"
