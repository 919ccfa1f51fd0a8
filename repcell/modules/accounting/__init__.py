"""
Módulo de Contabilidad (Accounting)

Libro de caja del local: ingresos y egresos, saldo de apertura por día y
arqueo diario.

Tablas principales:
- transactions: Movimientos de caja
- cash_sessions: Saldo de apertura por día local (date_key)
"""
