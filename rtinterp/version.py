"""Package version, parsed (not imported) by setup.py"""
__version__ = '0.3.0'
__full_version__ = __version__
