# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, URL routing, and the ASGI (HTTP + relay websocket) and WSGI
# entry points for the chat backend.
# =============================================================================
