# viewer/markdown/__init__.py
