# commons/__init__.py
