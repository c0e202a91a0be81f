"""
Configuration management for the Content API.

Contains the Pydantic settings object that is built once at startup and
handed to every component.
"""
