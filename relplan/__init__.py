"""relplan: release planning for multi-repository projects."""

__version__ = "0.3.0"
