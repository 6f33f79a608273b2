"""Toggle Elgato lights when the Mac camera turns on or off."""

__version__ = "0.3.0"

__all__ = ["__version__"]
