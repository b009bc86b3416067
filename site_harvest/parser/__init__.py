"""site_harvest.parser: извлечение текстового контента из HTML."""
