"""Servicios de dominio: almacén, fotos, filtros, estadísticas y exportación."""
