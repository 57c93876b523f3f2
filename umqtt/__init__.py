"""MQTT 3.1.1 packet codec, topic helpers and transport-level client state."""

__version__ = "0.1.0"