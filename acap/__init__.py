# acap/__init__.py
