from mc_core.pharmacy.signals.stock import low_stock  # noqa: F401
