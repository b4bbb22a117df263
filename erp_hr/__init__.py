"""ERP HR backend: leave balances and team attendance."""
