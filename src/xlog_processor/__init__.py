"""Process finished WAL segments from a pg_receivexlog archive directory."""

__version__ = "0.3.0"
