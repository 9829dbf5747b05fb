"""tilefetch: resolve and download component releases for product tiles."""
