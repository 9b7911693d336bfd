"""Domain services: sessions, authorization, permission catalog and administration."""
