# order_app/services/__init__.py
"""
Runnable services: the email and stock consumers, the order producer,
topic administration and the single-process orchestrator.
"""
