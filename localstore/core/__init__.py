"""Configuration, logging, hashing and codec primitives."""
