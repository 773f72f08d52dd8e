"""Core types, events and the frame orchestrator."""
