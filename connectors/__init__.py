"""
connectors — clients for external services.

Currently provides:
  • ``CurrencyConverter`` — exchange-rate lookups over HTTP (httpx)
"""
