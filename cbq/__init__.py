"""cbq - a clipboard manager that works like a queue or a stack"""

__version__ = "0.1.0"
