"""Task tracker core: task lifecycle, notification fan-out and queries."""
