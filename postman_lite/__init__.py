"""
Postman-Lite: request execution and forwarding engine.
"""
