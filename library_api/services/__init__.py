"""Domain services: seeding, catalog, borrowing and upload storage."""
