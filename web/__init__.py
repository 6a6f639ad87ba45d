"""
FastAPI web layer for RAWBOT.

Routers:
- web.gemini_routes.router   POST /api/gemini
- web.oauth_routes.router    GET  /api/instagram/oauth/callback
- web.webhook_routes.router  GET/POST /api/webhook
"""
