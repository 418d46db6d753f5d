"""Hash256: SHA-256 file digests with a NiceGUI front end."""
