"""
WeaveIt - narrated audio and scrolling-script videos from a text script.
"""
__version__ = "1.0.0"
