"""
Pin board service.

Pins (images with a title, description, destination link, size and tags)
are stored in a managed document store with their images in object storage.
This package provides the FastAPI application, the backend gateway, and the
board and composer state that used to live in the browser.
"""
