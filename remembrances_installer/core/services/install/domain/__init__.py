"""L1 Domain: pure decision logic (no I/O, no subprocess)."""
