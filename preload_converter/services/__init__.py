"""Service layer: file actions, change watching and batch orchestration.

Modules:
- preload_files: read/convert/write one file (extract or compile).
- watcher: polling change subscription over a file or directory tree.
- orchestration: file vs folder mode, job scheduling and fault isolation.
"""
