"""Banking domain: bank authentication handshake and raw transactions."""
