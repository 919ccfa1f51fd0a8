"""
Módulo de Facturación (Invoices)

- Creación, consulta y borrado de facturas de venta
- Integración con inventario (descuento de stock, sin bajar de 0)
- Reflejo de cada línea como ingreso en el libro de caja
- Total facturado por rango de fechas
- PDF imprimible de la factura

Solo el rol admin accede a estos endpoints.

Tablas principales:
- invoices: Facturas de venta
- invoice_items: Ítems de factura
"""
