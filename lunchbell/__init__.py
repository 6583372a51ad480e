"""Notification service for the daily lunch ordering application.

The package is laid out in layers: ``domain`` holds plain entities and the
preference rules, ``infrastructure`` talks to the database, SendGrid and open
streams, ``application`` orchestrates use cases and ``interfaces`` exposes
them over HTTP (and as a small sync client).
"""
