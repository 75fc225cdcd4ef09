"""5.1 surround convolution reverb driven by B-format impulse responses."""

__version__ = "0.1.0"

__all__ = ["__version__"]