"""Bootstrap wiring: database and engine construction."""
