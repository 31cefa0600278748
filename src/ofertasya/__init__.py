"""Ofertas YA - vehicle relocation offer watcher."""
