"""Storefront demo: hosted checkout plus webhook-driven entitlements."""
