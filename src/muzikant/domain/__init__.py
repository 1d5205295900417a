"""Domain layer: DTOs, value objects and exceptions."""
