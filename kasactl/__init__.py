"""LAN control for TP-Link Kasa smart plugs and bulbs."""

__version__ = "0.1.0"
