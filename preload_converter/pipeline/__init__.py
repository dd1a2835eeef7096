"""Pure line transforms for preload scripts.

Modules:
- extractor: pulls payload strings out of the PreloadStart/PreloadEnd region.
- compiler: wraps text lines into a preload function.
"""
