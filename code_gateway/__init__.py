"""
Code Gateway: quota-gated code generation proxy.
"""

__version__ = "1.0.0"
