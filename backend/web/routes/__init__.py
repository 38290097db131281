"""HTTP routers of the SIAKAD portal."""
