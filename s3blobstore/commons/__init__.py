"""Commons package - settings, telemetry and backend clients."""
