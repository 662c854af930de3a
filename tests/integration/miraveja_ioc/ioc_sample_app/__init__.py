"""Sample application scanned by the component scanning tests."""
