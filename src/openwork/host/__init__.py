"""Host server and client for the engine supervisor."""
