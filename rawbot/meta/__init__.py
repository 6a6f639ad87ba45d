"""
Meta (Facebook/Instagram) integration.

Implements the OAuth code exchange that links a Page's Instagram Business
account to a bot document.
"""
