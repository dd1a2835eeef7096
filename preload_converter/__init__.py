"""Preload converter: turn game preload scripts into text and back.

Subpackages
- pipeline: pure line transforms (extractor and compiler)
- services: file actions, change watching and batch orchestration
"""

__app_name__ = "preload-converter"
__description__ = (
    "Convert preload (.pld) scripts into plain text and compile text back into preload scripts."
)
__version__ = "1.0.0"
