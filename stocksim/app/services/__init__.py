"""Servicios de aplicación: agregación de velas, sincronización y tabla."""
