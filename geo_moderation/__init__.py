"""Geotagged photo moderation.

Reviewer-facing workflow for pending photo submissions: inspect, correct
the geolocation, then approve (publish the record and relocate the image
blob) or reject (purge both).  Metadata and blobs live in independently
failing stores, so every transition is an ordered, retry-safe sequence of
steps.
"""

__version__ = "0.1.0"
