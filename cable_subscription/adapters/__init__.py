"""Adapter modules for external integrations."""

from .websocket import WebSocketSendPort

__all__ = ["WebSocketSendPort"]
