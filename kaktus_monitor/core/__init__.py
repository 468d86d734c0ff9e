"""Core portal scraping: transport, login, islands, extraction, assembly."""
