"""Infrastructure layer: SQLite persistence behind the record store interface."""
