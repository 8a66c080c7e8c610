# order_app/__init__.py
"""
Order event consumers.

Services can be executed with:

    python -m order_app.services.<module_name>
"""
