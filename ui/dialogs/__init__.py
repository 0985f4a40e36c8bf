from .binary_setup import BinarySetupDialog

__all__ = ["BinarySetupDialog"]
