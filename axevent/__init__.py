# axevent/__init__.py
