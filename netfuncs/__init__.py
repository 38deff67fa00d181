"""Network function catalogue, name-resolver service, compute controller helpers and packet-processing building blocks."""

__version__ = "0.1.0"