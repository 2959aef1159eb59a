"""Domain layer: records, value objects, ports and exceptions."""
