"""Estado en memoria del mercado activo."""
